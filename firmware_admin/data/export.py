# firmware_admin/data/export.py
"""
Spreadsheet export of firmware, device and project data.

The export is scoped by the project/device dropdown filters only. The
free-text search and the current page do not narrow it, so the workbook
always covers every firmware of the selected project or device.
"""
from collections import OrderedDict
from datetime import datetime, timezone
from io import BytesIO
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from firmware_admin.data.formatting import format_date, format_time, format_iso
from firmware_admin.data.models import Device, Firmware, Project

SUMMARY_SHEET = "Firmware Summary"
FIRMWARES_SHEET = "All Firmwares with URLs"
DEVICES_SHEET = "Device Information"

EXPORT_NOTE = "Export includes ALL firmwares for selected project/device, not just filtered results"

FIRMWARE_COLUMNS = [
    "Firmware ID", "Version", "Description", "Device ID", "Device Name", "Project",
    "File Name", "File Size", "Upload Date", "Upload Time", "Full Upload Date",
    "Download URL", "Status",
]
DEVICE_COLUMNS = [
    "Device Name", "Device ID", "Project", "Status", "Date Created",
    "Total Firmwares", "Latest Firmware", "Latest Upload Date",
]

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_scope(
    firmwares: Sequence[Firmware],
    devices: Sequence[Device],
    project_filter: Optional[str] = None,
    device_filter: Optional[str] = None,
) -> Tuple[List[Firmware], List[Device]]:
    """
    Select the firmwares and devices covered by an export.

    Args:
        firmwares: Full firmware collection, in backend order
        devices: Full device collection
        project_filter: Internal id of the selected project, if any
        device_filter: Device identifier of the selected device, if any

    Returns:
        Tuple of (export firmwares, export devices), both in source order
    """
    export_firmwares = list(firmwares)
    export_devices = list(devices)

    if project_filter:
        export_devices = [d for d in export_devices if d.project == project_filter]
        project_device_ids = {d.device_id for d in export_devices}
        export_firmwares = [fw for fw in export_firmwares if fw.esp_id in project_device_ids]

    if device_filter:
        export_firmwares = [fw for fw in export_firmwares if fw.esp_id == device_filter]
        export_devices = [d for d in export_devices if d.device_id == device_filter]

    return export_firmwares, export_devices


def _or_na(value) -> object:
    return value if value else "N/A"


def build_export_sheets(
    firmwares: Sequence[Firmware],
    devices: Sequence[Device],
    projects: Sequence[Project],
    project_filter: Optional[str] = None,
    device_filter: Optional[str] = None,
    search_term: str = "",
    filtered_count: int = 0,
    download_base: str = "",
    now: Optional[datetime] = None,
    locale: str = "en-US",
    tz_name: str = "UTC",
) -> Dict[str, pd.DataFrame]:
    """
    Build the three export sheets.

    Args:
        firmwares, devices, projects: Source collections
        project_filter: Selected project id, if any
        device_filter: Selected device identifier, if any
        search_term: Current free-text search (reported only)
        filtered_count: Size of the current filtered view (reported only)
        download_base: Base URL that firmware ids are appended to
        now: Export timestamp, defaults to the current time
        locale, tz_name: Date/time rendering

    Returns:
        Ordered mapping of sheet name -> DataFrame
    """
    now = now or datetime.now(timezone.utc)
    devices_by_id: Dict[str, Device] = {}
    for d in devices:
        # First device wins, matching FirmwareListState.device_for()
        devices_by_id.setdefault(d.device_id, d)
    projects_by_id = {p.id: p for p in projects}

    selected_project = projects_by_id.get(project_filter) if project_filter else None
    selected_device = devices_by_id.get(device_filter) if device_filter else None

    export_firmwares, export_devices = export_scope(firmwares, devices, project_filter, device_filter)

    summary_rows = [
        ("Export Date", format_date(now, locale, tz_name)),
        ("Export Time", format_time(now, locale, tz_name)),
        ("Selected Project", selected_project.name if selected_project and selected_project.name else "All Projects"),
        ("Selected Device", selected_device.name if selected_device and selected_device.name else "All Devices"),
        ("Total Firmwares Exported", len(export_firmwares)),
        ("Total Devices", len(export_devices)),
        ("Current Search Term", search_term or "None"),
        ("Current Filtered Results", filtered_count),
        ("Note", EXPORT_NOTE),
    ]
    summary = pd.DataFrame(summary_rows, columns=["Field", "Value"])

    firmware_rows = []
    for fw in export_firmwares:
        device = devices_by_id.get(fw.esp_id)
        project = projects_by_id.get(device.project) if device and device.project else None
        uploaded = fw.uploaded_date
        firmware_rows.append({
            "Firmware ID": fw.id,
            "Version": fw.version,
            "Description": _or_na(fw.description),
            "Device ID": fw.esp_id,
            "Device Name": device.name if device and device.name else "Unknown",
            "Project": project.name if project and project.name else "N/A",
            "File Name": fw.file_name or fw.original_file_name or "N/A",
            "File Size": _or_na(fw.file_size),
            "Upload Date": format_date(uploaded, locale, tz_name) if uploaded else "N/A",
            "Upload Time": format_time(uploaded, locale, tz_name) if uploaded else "N/A",
            "Full Upload Date": format_iso(uploaded) if uploaded else "N/A",
            "Download URL": f"{download_base}/{fw.id}",
            "Status": "Active",
        })
    firmware_sheet = pd.DataFrame(firmware_rows, columns=FIRMWARE_COLUMNS)

    device_rows = []
    for device in export_devices:
        project = projects_by_id.get(device.project) if device.project else None
        device_firmwares = [fw for fw in export_firmwares if fw.esp_id == device.device_id]
        # "Latest" is the last firmware in backend order, not the newest date
        latest = device_firmwares[-1] if device_firmwares else None
        device_rows.append({
            "Device Name": device.name,
            "Device ID": device.device_id,
            "Project": project.name if project and project.name else "N/A",
            "Status": device.status or "Active",
            "Date Created": format_date(device.date_created, locale, tz_name) if device.date_created else "N/A",
            "Total Firmwares": len(device_firmwares),
            "Latest Firmware": latest.version if latest else "N/A",
            "Latest Upload Date": (
                format_date(latest.uploaded_date, locale, tz_name)
                if latest and latest.uploaded_date else "N/A"
            ),
        })
    device_sheet = pd.DataFrame(device_rows, columns=DEVICE_COLUMNS)

    return OrderedDict([
        (SUMMARY_SHEET, summary),
        (FIRMWARES_SHEET, firmware_sheet),
        (DEVICES_SHEET, device_sheet),
    ])


def _file_part(text: str) -> str:
    return text.replace("/", "-").replace("\\", "-")


def export_file_name(project_name: Optional[str], device_name: Optional[str], now: Optional[datetime] = None) -> str:
    """Firmware_Management_{project}_{device}_{YYYY-MM-DD}.xlsx (UTC date)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    project_part = _file_part(project_name or "All")
    device_part = _file_part(device_name or "AllDevices")
    return f"Firmware_Management_{project_part}_{device_part}_{now.strftime('%Y-%m-%d')}.xlsx"


def write_workbook(sheets: Dict[str, pd.DataFrame]) -> bytes:
    """Serialise sheets into one .xlsx workbook, in mapping order."""
    bio = BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            # Excel limits sheet names to 31 characters
            df.to_excel(writer, sheet_name=sheet_name[:31], index=False)
    bio.seek(0)
    return bio.getvalue()
