# firmware_admin/infrastructure/config.py
"""
Dashboard configuration.

Settings are read from a YAML file in the resources directory and can be
overridden by environment variables (a local .env file is loaded first).
The YAML file is created with default values when it does not exist.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from yaml.loader import SafeLoader
from dotenv import load_dotenv


DEFAULT_SETTINGS = {
    "backend_base_url": "http://localhost:5000/api",
    "page_size": 5,
    "request_timeout": 30,
    "bulk_concurrency": 1,
    "display_locale": "en-US",
    "display_timezone": "UTC",
    "log_level": "INFO",
}

# Environment variable -> settings key
ENV_OVERRIDES = {
    "BACKEND_BASE_URL": "backend_base_url",
    "FIRMWARE_PAGE_SIZE": "page_size",
    "REQUEST_TIMEOUT": "request_timeout",
    "BULK_CONCURRENCY": "bulk_concurrency",
    "DISPLAY_LOCALE": "display_locale",
    "DISPLAY_TIMEZONE": "display_timezone",
    "LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class Settings:
    backend_base_url: str
    page_size: int
    request_timeout: Optional[float]
    bulk_concurrency: int
    display_locale: str
    display_timezone: str
    log_level: str

    @property
    def download_base(self) -> str:
        """Base URL used to build firmware download links."""
        return f"{self.backend_base_url}/firmware/download"


def _create_default_config(config_path: Path) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as file:
        yaml.dump(DEFAULT_SETTINGS, file, sort_keys=False)


def _to_int(value, default: int, minimum: int = 1) -> int:
    try:
        return max(minimum, int(value))
    except (TypeError, ValueError):
        return default


def _to_timeout(value) -> Optional[float]:
    # 0, "none" or an empty value disables the timeout
    if value is None or str(value).strip().lower() in ("", "0", "none"):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(DEFAULT_SETTINGS["request_timeout"])


def load_settings(config_path: Optional[Path] = None, use_dotenv: bool = True) -> Settings:
    """
    Load dashboard settings.

    Args:
        config_path: Path to the YAML settings file. Created with defaults
            if missing. When None, only defaults and environment are used.
        use_dotenv: Whether to load a .env file before reading the environment

    Returns:
        Settings instance
    """
    if use_dotenv:
        load_dotenv()

    raw = dict(DEFAULT_SETTINGS)

    if config_path is not None:
        if not config_path.exists():
            _create_default_config(config_path)
        with open(config_path, "r") as file:
            file_values = yaml.load(file, Loader=SafeLoader) or {}
        if not isinstance(file_values, dict):
            raise ValueError(f"Invalid settings file: {config_path}")
        raw.update({k: v for k, v in file_values.items() if k in DEFAULT_SETTINGS})

    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is not None and value != "":
            raw[key] = value

    return Settings(
        backend_base_url=str(raw["backend_base_url"]).rstrip("/"),
        page_size=_to_int(raw["page_size"], DEFAULT_SETTINGS["page_size"]),
        request_timeout=_to_timeout(raw["request_timeout"]),
        bulk_concurrency=_to_int(raw["bulk_concurrency"], DEFAULT_SETTINGS["bulk_concurrency"]),
        display_locale=str(raw["display_locale"]),
        display_timezone=str(raw["display_timezone"]),
        log_level=str(raw["log_level"]).upper(),
    )
