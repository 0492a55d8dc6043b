# firmware_admin/auth/__init__.py
"""
Authentication and security module.

Handles the stored backend session (bearer token and user record),
session expiry and audit logging.
"""

from .session_store import SessionStore, SessionContext, SessionExpiredError
from .security import AuditLogger, setup_audit_logger

__all__ = [
    'SessionStore',
    'SessionContext',
    'SessionExpiredError',
    'AuditLogger',
    'setup_audit_logger',
]
