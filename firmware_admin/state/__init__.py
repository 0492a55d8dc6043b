# firmware_admin/state/__init__.py
"""
State management module.

Handles the firmware list state (search, filters, pagination,
selection) and the actions that talk to the backend.
"""

from .list_state import FirmwareListState, UploadForm, PAGE_SIZE, matches_search, paginate
from .actions import (
    FirmwareActions,
    NO_SELECTION,
    CONFIRM_DELETE_ONE,
    CONFIRM_DELETE_SELECTED,
)

__all__ = [
    'FirmwareListState',
    'UploadForm',
    'PAGE_SIZE',
    'matches_search',
    'paginate',
    'FirmwareActions',
    'NO_SELECTION',
    'CONFIRM_DELETE_ONE',
    'CONFIRM_DELETE_SELECTED',
]
