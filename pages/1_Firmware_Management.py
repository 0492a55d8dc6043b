import streamlit as st

from firmware_ui.theme import render_theme_toggle
from firmware_ui.layout import ensure_session_state_keys, reset_firmware_state
from firmware_ui.confirm import approved, render_confirmation, request_confirmation
from firmware_ui.progress import BulkProgress, render_pending_downloads, save_to_pending_downloads
from firmware_ui.table import render_filter_indicator, render_firmware_table, render_pagination
from firmware_ui.upload_form import capture_fields, render_upload_form
from firmware_admin.infrastructure import init_paths, load_settings, setup_logging
from firmware_admin.auth import SessionStore, SessionContext, SessionExpiredError, AuditLogger
from firmware_admin.external import FirmwareBackendAPI, BulkTaskRunner
from firmware_admin.data import XLSX_MIME
from firmware_admin.state import FirmwareActions, CONFIRM_DELETE_SELECTED

# ---------------------------------------------------------------------
# --- Page configuration
# ---------------------------------------------------------------------
st.set_page_config(page_title="Firmware Management", layout="wide")
st.sidebar.header("📦 Firmware Management")

render_theme_toggle()

paths = init_paths()
settings = load_settings(paths.config_path)
logger = setup_logging(paths.logs_dir, settings.log_level)
audit = AuditLogger(paths.logs_dir)
session_store = SessionStore(st.session_state)

# ---------------------------------------------------------------------
# --- Authentication Handling
# ---------------------------------------------------------------------
if not session_store.is_authenticated():
    st.switch_page("app.py")


def _on_session_expired():
    reset_firmware_state()
    st.session_state["session_expired"] = True


ensure_session_state_keys(settings)
state = st.session_state["firmware_list_state"]

session = SessionContext(session_store, on_expired=_on_session_expired)
api = FirmwareBackendAPI(settings.backend_base_url, token=session.token, timeout=settings.request_timeout)
actions = FirmwareActions(
    state,
    api,
    session,
    saver=save_to_pending_downloads,
    audit=audit,
    runner=BulkTaskRunner(concurrency=settings.bulk_concurrency),
)

with st.sidebar:
    user = session.user
    st.write(f"👤 {user.get('name') or user.get('email') or 'user'}")
    if st.button("🔄 Refresh", key="refresh_data"):
        st.session_state["firmware_data_loaded"] = False

# ---------------------------------------------------------------------
# --- Load collections (once per session, or after Refresh)
# ---------------------------------------------------------------------
try:
    if not st.session_state.get("firmware_data_loaded"):
        with st.spinner("Loading firmwares, devices and projects..."):
            actions.load_all()
        st.session_state["firmware_data_loaded"] = True
except SessionExpiredError:
    st.switch_page("app.py")

# ---------------------------------------------------------------------
# --- Header: search, filters, export, upload toggle
# ---------------------------------------------------------------------
st.markdown("## 📦 Firmware Management")

project_labels = dict(state.project_options())
device_labels = dict(state.device_options())

# Widgets follow the list state; the device select is emptied when the project changes
st.session_state["fw_search"] = state.search_term
st.session_state["fw_project"] = state.project_filter if state.project_filter in project_labels else None
st.session_state["fw_device"] = state.device_filter if state.device_filter in device_labels else None

col_search, col_project, col_device = st.columns([2, 1.5, 1.5])
with col_search:
    st.text_input(
        "Search",
        key="fw_search",
        placeholder="Search by version, date or device name...",
        on_change=lambda: state.set_search_term(st.session_state["fw_search"]),
    )
with col_project:
    st.selectbox(
        "Project",
        options=[None] + list(project_labels),
        format_func=lambda v: "All Projects" if v is None else project_labels.get(v, v),
        key="fw_project",
        on_change=lambda: state.set_project_filter(st.session_state["fw_project"]),
    )
with col_device:
    st.selectbox(
        "Device",
        options=[None] + list(device_labels),
        format_func=lambda v: "All Devices" if v is None else device_labels.get(v, v),
        key="fw_device",
        on_change=lambda: state.set_device_filter(st.session_state["fw_device"]),
    )

col_upload, col_export, col_export_dl, _ = st.columns([1, 1, 1.5, 2.5])
with col_upload:
    upload_label = "✖ Close upload" if state.upload_form.is_open else "⬆️ Upload Firmware"
    if st.button(upload_label, key="toggle_upload"):
        if state.upload_form.is_open:
            capture_fields(state.upload_form, st.session_state)
        state.upload_form.is_open = not state.upload_form.is_open
        st.rerun()
export_file = st.session_state.get("export_file")
if export_file and export_file["key"] != state.export_key():
    # Filters or data changed since the workbook was built
    st.session_state["export_file"] = None

with col_export:
    if st.button("📊 Export to Excel", key="export_excel"):
        with st.spinner("Building workbook..."):
            st.session_state["export_file"] = {
                "key": state.export_key(),
                "file": actions.export_workbook(settings.download_base),
            }
with col_export_dl:
    if st.session_state.get("export_file"):
        export_name, export_bytes = st.session_state["export_file"]["file"]
        st.download_button(
            f"⬇️ {export_name}",
            export_bytes,
            export_name,
            mime=XLSX_MIME,
            key="download_export",
        )

render_filter_indicator(state)

# ---------------------------------------------------------------------
# --- Messages
# ---------------------------------------------------------------------
if state.error:
    st.error(f"❌ {state.error}")
for notice in actions.take_notices():
    st.warning(f"⚠️ {notice}")

# ---------------------------------------------------------------------
# --- Confirmed destructive actions
# ---------------------------------------------------------------------
confirmed = render_confirmation()
if confirmed:
    if confirmed["action"] == "delete_one":
        with st.spinner("Deleting firmware..."):
            actions.delete_one(confirmed["target"], approved(confirmed))
    elif confirmed["action"] == "delete_selected":
        progress = BulkProgress("Deleting")
        actions.delete_selected(approved(confirmed), progress_callback=progress.callback)
        progress.clear()
    st.rerun()

# ---------------------------------------------------------------------
# --- Upload panel
# ---------------------------------------------------------------------
render_upload_form(state, actions)

# ---------------------------------------------------------------------
# --- Bulk action bar (only with a selection)
# ---------------------------------------------------------------------
if state.selected_ids:
    count = len(state.selected_ids)
    col_info, col_dl, col_del, col_clear = st.columns([2, 1.2, 1.2, 1])
    col_info.markdown(f"**{count} firmware(s) selected**")
    with col_dl:
        if st.button(f"⬇️ Download Selected ({count})", key="bulk_download"):
            progress = BulkProgress("Downloading")
            actions.download_selected(progress_callback=progress.callback)
            progress.clear()
            st.rerun()
    with col_del:
        if st.button(f"🗑️ Delete Selected ({count})", key="bulk_delete"):
            request_confirmation("delete_selected", CONFIRM_DELETE_SELECTED)
            st.rerun()
    with col_clear:
        if st.button("Clear selection", key="bulk_clear"):
            state.clear_selection()
            st.rerun()

render_pending_downloads()

# ---------------------------------------------------------------------
# --- Table and pagination
# ---------------------------------------------------------------------
if state.loading:
    st.info("Loading firmwares...")
render_firmware_table(state, actions)
render_pagination(state)
