# firmware_admin/external/__init__.py
"""
External API integration module.

Handles the firmware backend REST API and bulk per-item
request execution.
"""

from .backend_api import FirmwareBackendAPI, APIError, AuthenticationError
from .bulk import BulkTaskRunner, BulkResult, ItemResult

__all__ = [
    'FirmwareBackendAPI',
    'APIError',
    'AuthenticationError',
    'BulkTaskRunner',
    'BulkResult',
    'ItemResult',
]
