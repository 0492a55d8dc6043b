# firmware_ui/upload_form.py
from typing import Mapping

import streamlit as st

from firmware_admin.state.actions import FirmwareActions
from firmware_admin.state.list_state import FirmwareListState, UploadForm

UPLOAD_WIDGET_KEYS = ["upload_version", "upload_description", "upload_device"]


def _sync_widgets(state: FirmwareListState, device_values: list):
    form = state.upload_form
    if "upload_version" not in st.session_state:
        st.session_state["upload_version"] = form.version
    if "upload_description" not in st.session_state:
        st.session_state["upload_description"] = form.description
    if "upload_device" not in st.session_state or st.session_state["upload_device"] not in device_values:
        st.session_state["upload_device"] = form.device_id if form.device_id in device_values else None
    if "upload_nonce" not in st.session_state:
        st.session_state["upload_nonce"] = 0


def capture_fields(form: UploadForm, widgets: Mapping):
    """Copy the typed values into the form so they survive the panel closing."""
    form.version = widgets.get("upload_version", form.version) or ""
    form.description = widgets.get("upload_description", form.description) or ""
    form.device_id = widgets.get("upload_device", form.device_id)


def _clear_widgets():
    for key in UPLOAD_WIDGET_KEYS:
        st.session_state.pop(key, None)
    # A new key is the only way to empty a file_uploader
    st.session_state["upload_nonce"] = st.session_state.get("upload_nonce", 0) + 1


def render_upload_form(state: FirmwareListState, actions: FirmwareActions):
    """
    Render the upload panel while it is open.

    The fields keep their values after a failed upload so the user can retry
    without typing them again. A successful upload clears and closes it.
    """
    form = state.upload_form
    if not form.is_open:
        return

    device_labels = dict(state.device_options())
    device_values = [None] + list(device_labels)
    _sync_widgets(state, device_values)

    with st.container(border=True):
        st.markdown("### ⬆️ Upload Firmware")
        if state.project_filter:
            st.caption(f"Devices of project **{state.project_name() or state.project_filter}**")

        col1, col2 = st.columns(2)
        with col1:
            st.text_input("Version", key="upload_version", placeholder="e.g. 1.0.3")
            st.selectbox(
                "Device",
                options=device_values,
                format_func=lambda v: "Select device..." if v is None else device_labels.get(v, v),
                key="upload_device",
            )
        with col2:
            st.text_area("Description", key="upload_description", height=108)

        uploaded_file = st.file_uploader(
            "Firmware binary",
            key=f"upload_file_{st.session_state['upload_nonce']}",
            help="Drag and drop the compiled .bin file",
        )

        col_submit, col_cancel, _ = st.columns([1, 1, 4])
        with col_submit:
            submit = st.button("🚀 Upload", key="upload_submit", type="primary")
        with col_cancel:
            cancel = st.button("✖ Close", key="upload_cancel")

        if cancel:
            capture_fields(form, st.session_state)
            form.is_open = False
            st.rerun()

        if submit:
            capture_fields(form, st.session_state)
            if uploaded_file is not None:
                form.file_name = uploaded_file.name
                form.file_bytes = uploaded_file.getvalue()
            else:
                form.file_name = None
                form.file_bytes = None

            version = form.version
            with st.spinner("Uploading firmware..."):
                ok = actions.upload(form)
            if ok:
                _clear_widgets()
                st.toast(f"✅ Firmware {version} uploaded")
                st.rerun()
