# firmware_ui/layout.py
import streamlit as st
from hashlib import md5

from firmware_admin.infrastructure.config import Settings
from firmware_admin.state.list_state import FirmwareListState

# Keys owned by the firmware page; cleared on logout or session expiry
FIRMWARE_STATE_KEYS = [
    "firmware_list_state",
    "firmware_data_loaded",
    "pending_downloads",
    "pending_confirmation",
    "export_file",
]


def ensure_session_state_keys(settings: Settings):
    # ---------------------------------------------------------------------
    # --- Session-state initialization
    # ---------------------------------------------------------------------
    if "theme" not in st.session_state:
        st.session_state["theme"] = "dark"
    if "firmware_list_state" not in st.session_state:
        st.session_state["firmware_list_state"] = FirmwareListState(
            page_size=settings.page_size,
            locale=settings.display_locale,
            tz_name=settings.display_timezone,
        )
    if "firmware_data_loaded" not in st.session_state:
        st.session_state["firmware_data_loaded"] = False
    if "pending_downloads" not in st.session_state:
        st.session_state["pending_downloads"] = []
    if "pending_confirmation" not in st.session_state:
        st.session_state["pending_confirmation"] = None
    if "export_file" not in st.session_state:
        st.session_state["export_file"] = None


def reset_firmware_state():
    for key in FIRMWARE_STATE_KEYS:
        st.session_state.pop(key, None)


def short_key(*args) -> str:
    return md5("::".join(map(str, args)).encode("utf-8")).hexdigest()
