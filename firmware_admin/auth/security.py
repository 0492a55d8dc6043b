# firmware_admin/auth/security.py
"""
Security utilities for the dashboard.
Handles audit logging of destructive and session events.
"""
import logging
from pathlib import Path


def setup_audit_logger(log_dir: Path) -> logging.Logger:
    """
    Set up audit logger for security events.

    Args:
        log_dir: Directory to store audit logs

    Returns:
        Configured logger instance
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "audit.log"

    logger = logging.getLogger("firmware_admin.audit")
    logger.setLevel(logging.INFO)
    # Audit records only go to audit.log, not the application log
    logger.propagate = False

    # Avoid duplicate handlers
    if not any(isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_file.resolve()
               for h in logger.handlers):
        handler = logging.FileHandler(log_file, encoding='utf-8')
        handler.setLevel(logging.INFO)

        # Format: timestamp | level | message
        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


class AuditLogger:
    """Centralized audit logging for firmware and session events."""

    def __init__(self, log_dir: Path):
        self.logger = setup_audit_logger(log_dir)

    def log_login(self, user: str):
        self.logger.info(f"LOGIN | user={user}")

    def log_logout(self, user: str):
        self.logger.info(f"LOGOUT | user={user}")

    def log_session_expired(self, user: str):
        self.logger.warning(f"SESSION_EXPIRED | user={user}")

    def log_upload(self, user: str, version: str, esp_id: str, filename: str, size: int, success: bool):
        status = "SUCCESS" if success else "FAILED"
        self.logger.info(
            f"FIRMWARE_UPLOAD_{status} | user={user} | version={version} | device={esp_id} | file={filename} | size={size}"
        )

    def log_download(self, user: str, firmware_id: str, success: bool):
        status = "SUCCESS" if success else "FAILED"
        self.logger.info(f"FIRMWARE_DOWNLOAD_{status} | user={user} | firmware={firmware_id}")

    def log_delete(self, user: str, firmware_id: str, success: bool):
        status = "SUCCESS" if success else "FAILED"
        self.logger.info(f"FIRMWARE_DELETE_{status} | user={user} | firmware={firmware_id}")

    def log_export(self, user: str, filename: str, firmware_count: int):
        self.logger.info(f"EXPORT | user={user} | file={filename} | firmwares={firmware_count}")
