# firmware_admin/infrastructure/logging_setup.py
"""
Application logging.

Streamlit reruns the page script on every interaction, so handlers are only
attached once per process.
"""
import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = "firmware_admin"
LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_dir: Optional[Path] = None, level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger with a console handler and, when a log
    directory is given, a file handler writing firmware_admin.log.

    Args:
        log_dir: Directory for the log file
        level: Log level name (e.g. "INFO", "DEBUG")

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_dir / f"{LOGGER_NAME}.log", encoding='utf-8')
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        except OSError as e:
            logger.warning(f"File logging disabled: {e}")

    logger.propagate = False
    return logger
