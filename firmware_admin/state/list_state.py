"""
List state for the firmware management screen.

Holds the three source collections (firmwares, devices, projects) and the
view state (search term, project/device filters, page, selection, upload
form, messages). Everything the table shows is derived on demand from those
inputs; nothing derived is stored, so the view cannot go stale after a
collection or filter changes.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from firmware_admin.data.formatting import DEFAULT_LOCALE, format_date
from firmware_admin.data.models import Device, Firmware, Project

PAGE_SIZE = 5


@dataclass
class UploadForm:
    """Fields of the upload form. Kept intact after a failed upload."""
    version: str = ""
    description: str = ""
    device_id: Optional[str] = None
    file_name: Optional[str] = None
    file_bytes: Optional[bytes] = None
    is_open: bool = False

    def reset(self) -> None:
        self.version = ""
        self.description = ""
        self.device_id = None
        self.file_name = None
        self.file_bytes = None


def matches_search(firmware: Firmware, term: str, device: Optional[Device],
                   locale: str = DEFAULT_LOCALE, tz_name: str = "UTC") -> bool:
    """
    Free-text match on version, rendered upload date and device name.

    Version and device name are compared case-insensitively. The date only
    matches when the term is a substring of its locale rendering.
    """
    needle = term.lower()
    if needle in (firmware.version or "").lower():
        return True
    if firmware.uploaded_date and term in format_date(firmware.uploaded_date, locale, tz_name):
        return True
    device_name = device.name if device else ""
    return needle in device_name.lower()


def paginate(items: Sequence, page: int, page_size: int = PAGE_SIZE) -> list:
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


class FirmwareListState:
    """Source collections plus view state for the firmware table."""

    def __init__(self, page_size: int = PAGE_SIZE, locale: str = DEFAULT_LOCALE, tz_name: str = "UTC"):
        self.page_size = page_size
        self.locale = locale
        self.tz_name = tz_name

        self.firmwares: List[Firmware] = []
        self.devices: List[Device] = []
        self.projects: List[Project] = []

        self.search_term = ""
        self.project_filter: Optional[str] = None
        self.device_filter: Optional[str] = None
        self.page = 1
        self.selected_ids: List[str] = []
        self._select_all_undo: Optional[Tuple[Tuple[str, ...], List[str]]] = None

        self.upload_form = UploadForm()
        self.loading = False
        self.error = ""
        self.notices: List[str] = []
        # Bumped whenever a collection is replaced
        self.data_version = 0

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    def replace_firmwares(self, firmwares: Sequence[Firmware]) -> None:
        self.firmwares = list(firmwares)
        self.data_version += 1

    def replace_devices(self, devices: Sequence[Device]) -> None:
        self.devices = list(devices)
        self.data_version += 1

    def replace_projects(self, projects: Sequence[Project]) -> None:
        self.projects = list(projects)
        self.data_version += 1

    def device_for(self, esp_id: Optional[str]) -> Optional[Device]:
        return next((d for d in self.devices if d.device_id == esp_id), None)

    def project_for(self, project_id: Optional[str]) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def firmware_for(self, firmware_id: str) -> Optional[Firmware]:
        return next((fw for fw in self.firmwares if fw.id == firmware_id), None)

    def device_label(self, firmware: Firmware) -> str:
        """Device column text: "name (id)", or the raw esp_id for unknown devices."""
        device = self.device_for(firmware.esp_id)
        return device.label if device else firmware.esp_id

    def project_name(self) -> Optional[str]:
        project = self.project_for(self.project_filter) if self.project_filter else None
        return project.name if project else None

    def device_name(self) -> Optional[str]:
        device = self.device_for(self.device_filter) if self.device_filter else None
        return device.name if device else None

    def export_key(self) -> Tuple:
        """Inputs of an export; a built workbook is stale once this changes."""
        return self.project_filter, self.device_filter, self.search_term, self.data_version

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------
    def set_search_term(self, text: str) -> None:
        self.search_term = text or ""
        self.page = 1

    def set_project_filter(self, project_id: Optional[str]) -> None:
        self.project_filter = project_id or None
        self.device_filter = None
        self.page = 1

    def set_device_filter(self, device_id: Optional[str]) -> None:
        self.device_filter = device_id or None
        self.page = 1

    def project_devices(self) -> List[Device]:
        """Devices of the selected project, or all devices without a project filter."""
        if not self.project_filter:
            return list(self.devices)
        return [d for d in self.devices if d.project == self.project_filter]

    def device_options(self) -> List[Tuple[str, str]]:
        return [(d.device_id, d.label) for d in self.project_devices()]

    def project_options(self) -> List[Tuple[str, str]]:
        return [(p.id, p.name) for p in self.projects]

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------
    def _matches_device(self, firmware: Firmware, project_device_ids: Optional[set]) -> bool:
        if self.device_filter:
            return firmware.esp_id == self.device_filter
        if project_device_ids is not None:
            return firmware.esp_id in project_device_ids
        return True

    def filtered(self) -> List[Firmware]:
        """Firmwares matching the search term and the device/project filter."""
        devices_by_id: Dict[str, Device] = {}
        for d in self.devices:
            # First device wins, matching device_for()
            devices_by_id.setdefault(d.device_id, d)
        project_device_ids = None
        if self.project_filter and not self.device_filter:
            project_device_ids = {d.device_id for d in self.project_devices()}

        return [
            fw for fw in self.firmwares
            if matches_search(fw, self.search_term, devices_by_id.get(fw.esp_id), self.locale, self.tz_name)
            and self._matches_device(fw, project_device_ids)
        ]

    def total_pages(self) -> int:
        return math.ceil(len(self.filtered()) / self.page_size)

    def current_page(self) -> int:
        """The page actually shown, after shrinking filters or deletes."""
        return min(self.page, max(1, self.total_pages()))

    def filtered_and_paged(self) -> List[Firmware]:
        return paginate(self.filtered(), self.current_page(), self.page_size)

    def showing_range(self) -> Tuple[int, int, int]:
        """(first, last, total) for the "Showing X to Y of Z results" footer."""
        total = len(self.filtered())
        if total == 0:
            return 0, 0, 0
        page = self.current_page()
        first = (page - 1) * self.page_size + 1
        last = min(page * self.page_size, total)
        return first, last, total

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------
    def set_page(self, n: int) -> None:
        self.page = max(1, min(int(n), max(1, self.total_pages())))

    def can_go_previous(self) -> bool:
        return self.current_page() > 1

    def can_go_next(self) -> bool:
        total = self.total_pages()
        return total > 0 and self.current_page() < total

    def previous_page(self) -> None:
        if self.can_go_previous():
            self.set_page(self.current_page() - 1)

    def next_page(self) -> None:
        if self.can_go_next():
            self.set_page(self.current_page() + 1)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def is_selected(self, firmware_id: str) -> bool:
        return firmware_id in self.selected_ids

    def set_row_selected(self, firmware_id: str, checked: bool) -> None:
        self._select_all_undo = None
        if checked and firmware_id not in self.selected_ids:
            self.selected_ids.append(firmware_id)
        elif not checked and firmware_id in self.selected_ids:
            self.selected_ids.remove(firmware_id)

    def toggle_row_selection(self, firmware_id: str) -> None:
        self.set_row_selected(firmware_id, not self.is_selected(firmware_id))

    def toggle_all_visible_selection(self, checked: bool) -> None:
        """
        Header checkbox: add every visible id, or remove every visible id.

        Unchecking right after checking the same page restores the selection
        that existed before the check, so rows picked individually survive
        an accidental select-all.
        """
        visible = [fw.id for fw in self.filtered_and_paged()]
        undo = self._select_all_undo
        self._select_all_undo = None
        if checked:
            prior = list(self.selected_ids)
            for fid in visible:
                if fid not in self.selected_ids:
                    self.selected_ids.append(fid)
            self._select_all_undo = (tuple(visible), prior)
        elif undo is not None and undo[0] == tuple(visible):
            self.selected_ids = list(undo[1])
        else:
            visible_set = set(visible)
            self.selected_ids = [fid for fid in self.selected_ids if fid not in visible_set]

    def all_visible_selected(self) -> bool:
        visible = self.filtered_and_paged()
        return bool(visible) and all(fw.id in self.selected_ids for fw in visible)

    def clear_selection(self) -> None:
        self._select_all_undo = None
        self.selected_ids = []
