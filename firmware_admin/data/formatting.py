# firmware_admin/data/formatting.py
"""
Locale rendering of dates, times and file sizes.

The short-date rendering is also what free-text search matches against,
so the table, the search box and the export all go through these helpers.
"""
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_LOCALE = "en-US"

# locale -> (date pattern, 12-hour clock)
LOCALE_FORMATS = {
    "en-US": ("{month}/{day}/{year}", True),
    "en-GB": ("{day:02d}/{month:02d}/{year}", False),
    "de-DE": ("{day}.{month}.{year}", False),
}


def _localize(value: datetime, tz_name: str) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if not tz_name or tz_name.upper() == "UTC":
        return value.astimezone(timezone.utc)
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = timezone.utc
    return value.astimezone(tz)


def _locale_format(locale: str):
    return LOCALE_FORMATS.get(locale, LOCALE_FORMATS[DEFAULT_LOCALE])


def format_date(value: Optional[datetime], locale: str = DEFAULT_LOCALE, tz_name: str = "UTC") -> str:
    """Short date, e.g. 3/7/2024 for en-US. Empty string for None."""
    if value is None:
        return ""
    local = _localize(value, tz_name)
    pattern, _ = _locale_format(locale)
    return pattern.format(day=local.day, month=local.month, year=local.year)


def format_time(value: Optional[datetime], locale: str = DEFAULT_LOCALE, tz_name: str = "UTC") -> str:
    """Time of day, e.g. 2:05:09 PM for en-US or 14:05:09 for en-GB."""
    if value is None:
        return ""
    local = _localize(value, tz_name)
    _, twelve_hour = _locale_format(locale)
    if twelve_hour:
        hour = local.hour % 12 or 12
        suffix = "AM" if local.hour < 12 else "PM"
        return f"{hour}:{local.minute:02d}:{local.second:02d} {suffix}"
    return f"{local.hour:02d}:{local.minute:02d}:{local.second:02d}"


def format_iso(value: Optional[datetime]) -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-03-07T14:05:09.000Z."""
    if value is None:
        return ""
    utc = _localize(value, "UTC")
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def format_file_size(size: Any) -> str:
    try:
        size = float(size)
    except (TypeError, ValueError):
        return ""
    for unit in ["B", "KB", "MB"]:
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
