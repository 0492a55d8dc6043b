"""Firmware actions: network operations and their error handling."""
import logging
from datetime import datetime, timezone
from io import BytesIO

import pandas as pd
import pytest

from firmware_admin.auth.security import AuditLogger
from firmware_admin.auth.session_store import SessionExpiredError
from firmware_admin.external.backend_api import APIError, AuthenticationError
from firmware_admin.state.actions import (
    CONFIRM_DELETE_ONE,
    CONFIRM_DELETE_SELECTED,
    NO_SELECTION,
    FirmwareActions,
)
from firmware_admin.state.list_state import FirmwareListState

from conftest import FakeAPI, make_firmware


class Recorder:
    """Confirm callback that records prompts and answers with a fixed value."""

    def __init__(self, answer=True):
        self.answer = answer
        self.prompts = []

    def __call__(self, message):
        self.prompts.append(message)
        return self.answer


@pytest.fixture
def api(firmwares, devices, projects):
    return FakeAPI(firmwares, devices, projects)


@pytest.fixture
def saved():
    return []


@pytest.fixture
def actions(api, session, saved):
    state = FirmwareListState()
    controller = FirmwareActions(state, api, session, saver=lambda name, content: saved.append((name, content)))
    controller.load_all()
    return controller


def test_load_all_fills_collections_and_sends_token(actions, api):
    assert len(actions.state.firmwares) == 7
    assert len(actions.state.devices) == 3
    assert len(actions.state.projects) == 2
    assert ("list_devices", "secret-token") in api.calls
    assert ("list_projects", "secret-token") in api.calls
    assert not actions.state.loading


def test_fetch_firmwares_failure_sets_message(actions, api):
    api.fail_on[("list_firmwares", None)] = APIError("boom")
    assert not actions.fetch_firmwares()
    assert actions.state.error == "Failed to fetch firmwares"
    assert not actions.state.loading
    assert len(actions.state.firmwares) == 7


def test_fetch_devices_failure_keeps_previous_devices(actions, api):
    api.fail_on[("list_devices", None)] = APIError("boom", status_code=500)
    assert not actions.fetch_devices()
    assert len(actions.state.devices) == 3


def test_fetch_projects_failure_leaves_empty_list(actions, api):
    api.fail_on[("list_projects", None)] = APIError("boom", status_code=500)
    assert not actions.fetch_projects()
    assert actions.state.projects == []


@pytest.mark.parametrize("method", ["fetch_devices", "fetch_projects"])
def test_401_expires_session(actions, api, session_store, expired_calls, method):
    api.fail_on[("list_devices", None)] = AuthenticationError("expired", status_code=401)
    api.fail_on[("list_projects", None)] = AuthenticationError("expired", status_code=401)
    with pytest.raises(SessionExpiredError):
        getattr(actions, method)()
    assert not session_store.is_authenticated()
    assert expired_calls == [True]


def test_upload_success_resets_and_closes_form(actions, api):
    form = actions.state.upload_form
    form.is_open = True
    form.version = "2.0.0"
    form.description = "new radio stack"
    form.device_id = "dev-1"
    form.file_name = "fw.bin"
    form.file_bytes = b"\x00\x01"
    api.firmwares.append(make_firmware(8))

    assert actions.upload()
    assert api.calls_named("upload") == [("upload", "2.0.0", "new radio stack", "dev-1", "fw.bin", b"\x00\x01")]
    assert not form.is_open
    assert form.version == ""
    assert form.file_bytes is None
    assert len(actions.state.firmwares) == 8
    assert actions.state.error == ""


def test_upload_failure_keeps_form(actions, api):
    form = actions.state.upload_form
    form.is_open = True
    form.version = "2.0.0"
    form.device_id = "dev-2"
    form.file_name = "fw.bin"
    form.file_bytes = b"\x00"
    api.fail_on[("upload", None)] = APIError("Version already exists", status_code=400)
    fetches_before = len(api.calls_named("list_firmwares"))

    assert not actions.upload()
    assert actions.state.error == "Upload failed: Version already exists"
    assert form.is_open
    assert form.version == "2.0.0"
    assert form.device_id == "dev-2"
    assert form.file_bytes == b"\x00"
    assert len(api.calls_named("list_firmwares")) == fetches_before


def test_upload_with_empty_version_is_sent(actions, api):
    form = actions.state.upload_form
    form.device_id = "dev-1"
    assert actions.upload()
    call = api.calls_named("upload")[0]
    assert call[1] == ""


def test_download_one_prefers_original_file_name(actions, saved):
    fw = actions.state.firmwares[0]
    assert actions.download_one(fw)
    assert saved == [("firmware-1.bin", b"binary-fw-1")]


def test_download_one_failure_adds_notice(actions, api, saved):
    api.fail_on[("download", "fw-1")] = APIError("gone", status_code=404)
    assert not actions.download_one(actions.state.firmwares[0])
    assert saved == []
    assert actions.take_notices() == ["Download failed for firmware-1.bin"]
    assert actions.state.notices == []


def test_download_selected_continues_after_failure(actions, api, saved):
    for fid in ["fw-1", "fw-2", "fw-3"]:
        actions.state.toggle_row_selection(fid)
    api.fail_on[("download", "fw-2")] = APIError("gone", status_code=404)

    result = actions.download_selected()

    assert [c[1] for c in api.calls_named("download")] == ["fw-1", "fw-2", "fw-3"]
    assert saved == [("stored-1.bin", b"binary-fw-1"), ("stored-3.bin", b"binary-fw-3")]
    assert actions.take_notices() == ["Download failed for stored-2.bin"]
    assert len(result.failed) == 1
    assert actions.state.selected_ids == ["fw-1", "fw-2", "fw-3"]


def test_download_selected_includes_ids_on_other_pages(actions, api):
    actions.state.toggle_row_selection("fw-7")
    actions.state.set_search_term("1.0.1")
    actions.download_selected()
    assert [c[1] for c in api.calls_named("download")] == ["fw-7"]


def test_download_selected_without_selection(actions, api):
    assert actions.download_selected() is None
    assert api.calls_named("download") == []
    assert actions.take_notices() == [NO_SELECTION]


def test_delete_one_confirms_once_and_refreshes(actions, api):
    confirm = Recorder(True)
    assert actions.delete_one("fw-1", confirm)
    assert confirm.prompts == [CONFIRM_DELETE_ONE]
    assert api.calls_named("delete") == [("delete", "fw-1")]
    assert "fw-1" not in [fw.id for fw in actions.state.firmwares]


def test_delete_one_declined_sends_nothing(actions, api):
    assert not actions.delete_one("fw-1", Recorder(False))
    assert api.calls_named("delete") == []


def test_delete_one_failure_keeps_row(actions, api):
    api.fail_on[("delete", "fw-1")] = APIError("locked", status_code=409)
    assert not actions.delete_one("fw-1", Recorder(True))
    assert actions.state.error == "Failed to delete firmware"
    assert "fw-1" in [fw.id for fw in actions.state.firmwares]


def test_delete_selected_success_clears_selection_and_refreshes(actions, api):
    for fid in ["fw-1", "fw-6"]:
        actions.state.toggle_row_selection(fid)
    confirm = Recorder(True)

    result = actions.delete_selected(confirm)

    assert result.ok
    assert confirm.prompts == [CONFIRM_DELETE_SELECTED]
    assert actions.state.selected_ids == []
    assert [fw.id for fw in actions.state.firmwares] == ["fw-2", "fw-3", "fw-4", "fw-5", "fw-7"]


def test_delete_selected_stops_at_first_failure(actions, api):
    for fid in ["fw-1", "fw-2", "fw-3"]:
        actions.state.toggle_row_selection(fid)
    api.fail_on[("delete", "fw-2")] = APIError("locked", status_code=409)
    fetches_before = len(api.calls_named("list_firmwares"))

    result = actions.delete_selected(Recorder(True))

    assert [c[1] for c in api.calls_named("delete")] == ["fw-1", "fw-2"]
    assert result.aborted
    assert result.skipped == ["fw-3"]
    assert actions.state.error == "Failed to delete selected firmwares"
    assert actions.state.selected_ids == ["fw-1", "fw-2", "fw-3"]
    assert len(api.calls_named("list_firmwares")) == fetches_before


def test_delete_selected_declined_sends_nothing(actions, api):
    actions.state.toggle_row_selection("fw-1")
    assert actions.delete_selected(Recorder(False)) is None
    assert api.calls_named("delete") == []
    assert actions.state.selected_ids == ["fw-1"]


def test_delete_selected_without_selection_does_not_prompt(actions):
    confirm = Recorder(True)
    assert actions.delete_selected(confirm) is None
    assert confirm.prompts == []
    assert actions.take_notices() == [NO_SELECTION]


def test_export_workbook_uses_current_filters(actions):
    now = datetime(2024, 3, 7, 9, 0, tzinfo=timezone.utc)
    actions.state.set_project_filter("p-2")
    actions.state.set_search_term("1.0.3")

    file_name, content = actions.export_workbook("http://backend/api/firmware/download", now=now)

    assert file_name == "Firmware_Management_Weather_AllDevices_2024-03-07.xlsx"
    workbook = pd.read_excel(BytesIO(content), sheet_name=None, engine="openpyxl")
    assert list(workbook["All Firmwares with URLs"]["Firmware ID"]) == ["fw-3", "fw-5"]
    summary = dict(zip(workbook["Firmware Summary"]["Field"], workbook["Firmware Summary"]["Value"]))
    assert summary["Current Search Term"] == "1.0.3"
    assert str(summary["Current Filtered Results"]) == "1"


def test_audit_log_records_destructive_actions(api, session, saved, tmp_path):
    audit = AuditLogger(tmp_path / "logs")
    controller = FirmwareActions(FirmwareListState(), api, session,
                                 saver=lambda name, content: saved.append(name), audit=audit)
    controller.load_all()
    controller.delete_one("fw-1", Recorder(True))
    for handler in audit.logger.handlers:
        handler.flush()
    log_text = (tmp_path / "logs" / "audit.log").read_text(encoding="utf-8")
    assert "FIRMWARE_DELETE_SUCCESS | user=ada@example.com | firmware=fw-1" in log_text


def test_audit_records_stay_out_of_the_application_log(tmp_path):
    seen = []

    class Collect(logging.Handler):
        def emit(self, record):
            seen.append(record.getMessage())

    app_logger = logging.getLogger("firmware_admin")
    handler = Collect()
    app_logger.addHandler(handler)
    try:
        audit = AuditLogger(tmp_path / "logs")
        audit.log_login("ada@example.com")
    finally:
        app_logger.removeHandler(handler)

    assert not audit.logger.propagate
    assert seen == []
    for audit_handler in audit.logger.handlers:
        audit_handler.flush()
    assert "LOGIN | user=ada@example.com" in (tmp_path / "logs" / "audit.log").read_text(encoding="utf-8")
