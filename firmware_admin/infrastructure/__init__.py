# firmware_admin/infrastructure/__init__.py
"""
Infrastructure and utilities module.

Handles path resolution, configuration and logging.
"""

from .paths import Paths, init_paths
from .config import Settings, load_settings, DEFAULT_SETTINGS
from .logging_setup import setup_logging

__all__ = [
    'Paths',
    'init_paths',
    'Settings',
    'load_settings',
    'DEFAULT_SETTINGS',
    'setup_logging',
]
