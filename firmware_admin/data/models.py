# firmware_admin/data/models.py
"""
Records returned by the firmware backend.

The backend speaks camelCase JSON with Mongo-style `_id` keys. These
dataclasses normalise a payload once, right after it is fetched, so the rest
of the dashboard never deals with raw dictionaries.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a backend timestamp into a timezone-aware datetime.

    Naive values are taken as UTC. Missing or unparseable values give None.
    """
    if value is None or value == "":
        return None
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Firmware:
    id: str
    version: str
    esp_id: str
    description: Optional[str] = None
    file_name: Optional[str] = None
    original_file_name: Optional[str] = None
    file_size: Optional[Any] = None
    uploaded_date: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Firmware":
        return cls(
            id=str(data.get("_id", data.get("id", ""))),
            version=str(data.get("version") or ""),
            esp_id=str(data.get("esp_id") or ""),
            description=_optional_str(data.get("description")),
            file_name=_optional_str(data.get("fileName")),
            original_file_name=_optional_str(data.get("originalFileName")),
            file_size=data.get("fileSize"),
            uploaded_date=parse_timestamp(data.get("uploadedDate")),
        )


@dataclass(frozen=True)
class Device:
    device_id: str
    name: str
    project: Optional[str] = None
    status: Optional[str] = None
    date_created: Optional[datetime] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.device_id})"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Device":
        project = data.get("project")
        # Some endpoints populate the project reference
        if isinstance(project, dict):
            project = project.get("_id")
        return cls(
            device_id=str(data.get("deviceId") or ""),
            name=str(data.get("name") or ""),
            project=_optional_str(project),
            status=_optional_str(data.get("status")),
            date_created=parse_timestamp(data.get("dateCreated")),
        )


@dataclass(frozen=True)
class Project:
    id: str
    name: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=str(data.get("_id", data.get("id", ""))),
            name=str(data.get("projectName") or ""),
        )


def parse_firmwares(payload: Any) -> List[Firmware]:
    return [Firmware.from_api(item) for item in _as_list(payload)]


def parse_devices(payload: Any) -> List[Device]:
    return [Device.from_api(item) for item in _as_list(payload)]


def parse_projects(payload: Any) -> List[Project]:
    return [Project.from_api(item) for item in _as_list(payload)]


def _as_list(payload: Any) -> Iterable[Dict[str, Any]]:
    # Anything that is not a JSON array counts as an empty collection
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]
