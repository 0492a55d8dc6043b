"""
Firmware actions: the network-facing operations of the firmware screen.

Each operation catches backend errors at its own boundary, records a
user-facing message on the list state and logs the failure. Only a 401 from
the devices/projects endpoints escapes, as SessionExpiredError, after the
stored session has been cleared.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from firmware_admin.auth.security import AuditLogger
from firmware_admin.auth.session_store import SessionContext, SessionExpiredError
from firmware_admin.data.export import build_export_sheets, export_file_name, export_scope, write_workbook
from firmware_admin.data.models import Firmware
from firmware_admin.external.backend_api import APIError, AuthenticationError, FirmwareBackendAPI
from firmware_admin.external.bulk import BulkResult, BulkTaskRunner, ProgressCallback
from firmware_admin.state.list_state import FirmwareListState, UploadForm

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]
SaveCallback = Callable[[str, bytes], None]

DEFAULT_FILE_NAME = "firmware.bin"
NO_SELECTION = "No firmware selected"
CONFIRM_DELETE_ONE = "Delete this firmware?"
CONFIRM_DELETE_SELECTED = "Delete all selected firmwares?"


class FirmwareActions:
    """Wires the list state to the backend API."""

    def __init__(
        self,
        state: FirmwareListState,
        api: FirmwareBackendAPI,
        session: SessionContext,
        saver: SaveCallback,
        audit: Optional[AuditLogger] = None,
        runner: Optional[BulkTaskRunner] = None,
    ):
        """
        Args:
            state: List state to read from and write results into
            api: Backend client
            session: Authenticated session; expired on 401
            saver: Callback(file_name, content) offering a file to the user
            audit: Optional audit logger
            runner: Bulk runner, sequential by default
        """
        self.state = state
        self.api = api
        self.session = session
        self.saver = saver
        self.audit = audit
        self.runner = runner or BulkTaskRunner(concurrency=1)

    @property
    def _user(self) -> str:
        user = self.session.user or {}
        return str(user.get("email") or user.get("name") or "unknown")

    def _fail(self, message: str) -> None:
        self.state.error = message
        self.state.loading = False

    def _notify(self, message: str) -> None:
        self.state.notices.append(message)

    def _expire_session(self, error: AuthenticationError):
        logger.warning(f"Session rejected by backend: {error}")
        user = self._user
        if self.audit:
            self.audit.log_session_expired(user)
        self.session.expire()
        raise SessionExpiredError(str(error))

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    def load_all(self) -> None:
        self.fetch_firmwares()
        self.fetch_devices()
        self.fetch_projects()

    def fetch_firmwares(self) -> bool:
        self.state.loading = True
        self.state.error = ""
        try:
            firmwares = self.api.list_firmwares()
        except APIError as e:
            logger.error(f"Failed to fetch firmwares: {e}")
            self._fail("Failed to fetch firmwares")
            return False
        self.state.replace_firmwares(firmwares)
        self.state.loading = False
        logger.info(f"Loaded {len(firmwares)} firmwares")
        return True

    def fetch_devices(self) -> bool:
        self.api.token = self.session.token
        try:
            devices = self.api.list_devices()
        except AuthenticationError as e:
            self._expire_session(e)
        except APIError as e:
            # Keep the devices we already have
            logger.warning(f"Failed to fetch devices: {e}")
            return False
        self.state.replace_devices(devices)
        return True

    def fetch_projects(self) -> bool:
        self.api.token = self.session.token
        try:
            projects = self.api.list_projects()
        except AuthenticationError as e:
            self._expire_session(e)
        except APIError as e:
            logger.warning(f"Failed to fetch projects: {e}")
            self.state.replace_projects([])
            return False
        self.state.replace_projects(projects)
        return True

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------
    def upload(self, form: Optional[UploadForm] = None) -> bool:
        """
        Submit the upload form.

        On success the form is reset and closed and the list refreshed. On
        failure the form stays open with its fields so the user can retry.
        """
        form = form or self.state.upload_form
        self.state.loading = True
        self.state.error = ""
        size = len(form.file_bytes) if form.file_bytes else 0
        try:
            self.api.upload_firmware(
                version=form.version,
                description=form.description,
                esp_id=form.device_id,
                file_name=form.file_name,
                content=form.file_bytes,
            )
        except APIError as e:
            logger.error(f"Upload of version '{form.version}' failed: {e}")
            if self.audit:
                self.audit.log_upload(self._user, form.version, form.device_id or "", form.file_name or "", size, False)
            self._fail(f"Upload failed: {e}")
            return False

        if self.audit:
            self.audit.log_upload(self._user, form.version, form.device_id or "", form.file_name or "", size, True)
        logger.info(f"Uploaded firmware version '{form.version}' for device {form.device_id}")
        form.is_open = False
        form.reset()
        self.fetch_firmwares()
        return True

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------
    def download_one(self, firmware: Firmware) -> bool:
        name = firmware.original_file_name or firmware.file_name or DEFAULT_FILE_NAME
        try:
            content = self.api.download_firmware(firmware.id)
        except APIError as e:
            logger.warning(f"Download of {firmware.id} failed: {e}")
            if self.audit:
                self.audit.log_download(self._user, firmware.id, False)
            self._notify(f"Download failed for {firmware.original_file_name or firmware.file_name or firmware.id}")
            return False
        if self.audit:
            self.audit.log_download(self._user, firmware.id, True)
        self.saver(name, content)
        return True

    def download_selected(self, progress_callback: Optional[ProgressCallback] = None) -> Optional[BulkResult]:
        """
        Download every selected firmware, one after the other.

        A failed item adds a notice naming it and the loop continues.
        """
        ids = list(self.state.selected_ids)
        if not ids:
            self._notify(NO_SELECTION)
            return None

        result = self.runner.run(ids, self.api.download_firmware, stop_on_error=False,
                                 progress_callback=progress_callback)

        for item in result.results:
            fw = self.state.firmware_for(item.item)
            if item.ok:
                self.saver((fw.file_name if fw else None) or DEFAULT_FILE_NAME, item.value)
            else:
                self._notify(f"Download failed for {(fw.file_name if fw else None) or item.item}")
            if self.audit:
                self.audit.log_download(self._user, item.item, item.ok)

        logger.info(f"Bulk download: {len(result.succeeded)} ok, {len(result.failed)} failed")
        return result

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------
    def delete_one(self, firmware_id: str, confirm: ConfirmCallback) -> bool:
        if not confirm(CONFIRM_DELETE_ONE):
            return False
        self.state.loading = True
        self.state.error = ""
        try:
            self.api.delete_firmware(firmware_id)
        except APIError as e:
            logger.error(f"Delete of {firmware_id} failed: {e}")
            if self.audit:
                self.audit.log_delete(self._user, firmware_id, False)
            self._fail("Failed to delete firmware")
            return False
        if self.audit:
            self.audit.log_delete(self._user, firmware_id, True)
        self.fetch_firmwares()
        return True

    def delete_selected(self, confirm: ConfirmCallback,
                        progress_callback: Optional[ProgressCallback] = None) -> Optional[BulkResult]:
        """
        Delete every selected firmware after one confirmation for the batch.

        The first failure stops the batch: later ids are not attempted, one
        aggregate error is shown and the selection is kept.
        """
        ids = list(self.state.selected_ids)
        if not ids:
            self._notify(NO_SELECTION)
            return None
        if not confirm(CONFIRM_DELETE_SELECTED):
            return None

        self.state.loading = True
        self.state.error = ""
        result = self.runner.run(ids, self.api.delete_firmware, stop_on_error=True,
                                 progress_callback=progress_callback)

        if self.audit:
            for item in result.results:
                self.audit.log_delete(self._user, item.item, item.ok)

        if not result.ok:
            logger.error(
                f"Bulk delete stopped after {len(result.results)} of {len(ids)} "
                f"({len(result.skipped)} not attempted)"
            )
            self._fail("Failed to delete selected firmwares")
            return result

        logger.info(f"Bulk delete removed {len(ids)} firmwares")
        self.state.clear_selection()
        self.fetch_firmwares()
        return result

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_workbook(self, download_base: str, now: Optional[datetime] = None) -> Tuple[str, bytes]:
        """
        Build the export workbook for the current filters.

        Returns:
            Tuple of (file name, xlsx bytes)
        """
        state = self.state
        sheets = build_export_sheets(
            state.firmwares,
            state.devices,
            state.projects,
            project_filter=state.project_filter,
            device_filter=state.device_filter,
            search_term=state.search_term,
            filtered_count=len(state.filtered()),
            download_base=download_base,
            now=now,
            locale=state.locale,
            tz_name=state.tz_name,
        )
        file_name = export_file_name(state.project_name(), state.device_name(), now)
        content = write_workbook(sheets)
        if self.audit:
            exported, _ = export_scope(state.firmwares, state.devices, state.project_filter, state.device_filter)
            self.audit.log_export(self._user, file_name, len(exported))
        logger.info(f"Exported {file_name}")
        return file_name, content

    def take_notices(self) -> List[str]:
        notices, self.state.notices = self.state.notices, []
        return notices
