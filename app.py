import streamlit as st

# ---------------------------------------------------------------------
# --- Local Libraries
# ---------------------------------------------------------------------
from firmware_ui.theme import render_theme_toggle
from firmware_ui.layout import ensure_session_state_keys, reset_firmware_state
from firmware_ui.shared_content import (
    render_about_info_content,
    render_app_features_content,
    render_login_help_content,
)
from firmware_admin.infrastructure import init_paths, load_settings, setup_logging
from firmware_admin.auth import SessionStore, AuditLogger
from firmware_admin.external import FirmwareBackendAPI

# ---------------------------------------------------------------------
# --- Page setup
# ---------------------------------------------------------------------
st.set_page_config(page_title="ESP Firmware Admin", layout="wide")
st.title("📟 ESP Firmware Admin")

# ---------------------------------------------------------------------
# --- Theme Toggle (at the top, visible to all users)
# ---------------------------------------------------------------------
render_theme_toggle()

# ---------------------------------------------------------------------
# --- Configuration & logging
# ---------------------------------------------------------------------
paths = init_paths()
settings = load_settings(paths.config_path)
logger = setup_logging(paths.logs_dir, settings.log_level)
audit = AuditLogger(paths.logs_dir)
session_store = SessionStore(st.session_state)

ensure_session_state_keys(settings)

# ---------------------------------------------------------------------
# --- Session expired notice (set by the firmware page on HTTP 401)
# ---------------------------------------------------------------------
if st.session_state.pop("session_expired", False):
    st.warning("⏰ Your session has expired. Please log in again.")

# ---------------------------------------------------------------------
# --- Login boundary
# ---------------------------------------------------------------------
if not session_store.is_authenticated():
    col1, col2 = st.columns(2)
    with col1:
        render_about_info_content()
    with col2:
        render_login_help_content()
        with st.form("login_form"):
            name = st.text_input("Name")
            email = st.text_input("Email")
            token = st.text_input("Bearer token", type="password")
            submitted = st.form_submit_button("🔐 Login")

        if submitted:
            if not token.strip():
                st.error("❌ Please enter a token.")
            else:
                api = FirmwareBackendAPI(settings.backend_base_url, token=token.strip(),
                                         timeout=settings.request_timeout)
                with st.spinner("Checking token with the backend..."):
                    valid = api.validate_token()
                if valid:
                    user = {"name": name.strip(), "email": email.strip()}
                    session_store.save(token, user)
                    audit.log_login(user["email"] or user["name"] or "unknown")
                    logger.info(f"User {user['email'] or user['name']} logged in")
                    reset_firmware_state()
                    st.rerun()
                else:
                    st.error("❌ The backend rejected this token.")

    st.markdown("---")
    render_app_features_content()
    st.stop()

# ---------------------------------------------------------------------
# --- Authenticated area
# ---------------------------------------------------------------------
user = session_store.user
display_name = user.get("name") or user.get("email") or "user"

with st.sidebar:
    st.write(f"👤 Welcome, **{display_name}**!")
    if st.button("🚪 Logout", key="logout"):
        audit.log_logout(user.get("email") or display_name)
        logger.info(f"User {display_name} logged out")
        session_store.clear()
        reset_firmware_state()
        st.rerun()

render_about_info_content()

st.markdown("## 🚀 Getting Started")
st.markdown(f"Connected to backend **{settings.backend_base_url}**.")
if st.button("📦 Open Firmware Management", key="open_firmware_page"):
    st.switch_page("pages/1_Firmware_Management.py")

st.markdown("---")
render_app_features_content()

st.caption("ESP Firmware Admin • Made with ❤️ and Streamlit")
