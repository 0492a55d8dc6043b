# firmware_admin/data/__init__.py
"""
Data module.

Backend record types, locale formatting and the spreadsheet export.
"""

from .models import (
    Firmware,
    Device,
    Project,
    parse_timestamp,
    parse_firmwares,
    parse_devices,
    parse_projects,
)
from .formatting import format_date, format_time, format_iso, format_file_size
from .export import (
    export_scope,
    build_export_sheets,
    export_file_name,
    write_workbook,
    XLSX_MIME,
)

__all__ = [
    'Firmware',
    'Device',
    'Project',
    'parse_timestamp',
    'parse_firmwares',
    'parse_devices',
    'parse_projects',
    'format_date',
    'format_time',
    'format_iso',
    'format_file_size',
    'export_scope',
    'build_export_sheets',
    'export_file_name',
    'write_workbook',
    'XLSX_MIME',
]
