# firmware_ui/shared_content.py
import streamlit as st


def render_about_info_content():
    """
    Render the application summary shown on the landing page.
    """
    st.markdown(""" ## 📟 ESP Firmware Admin

    Admin dashboard for the firmware binaries flashed to your ESP devices.
    Keep track of which build belongs to which device and project, and
    push new versions to the backend from one place.
    - ⬆️ Firmware Upload
    - 🔍 Search & Filters by Project / Device
    - ⬇️ Single & Bulk Downloads
    - 🗑️ Single & Bulk Deletes
    - 📊 Excel Export with Download URLs
    """)


def render_app_features_content():
    """
    Render the feature walkthrough below the login form.
    """
    st.markdown("## 🎯 How it works")

    col1, col2 = st.columns([1, 2])
    with col1:
        st.markdown("### 🔍 Browse")
    with col2:
        st.markdown("""
        1. **Search** by version, upload date or device name
        2. **Filter** by project, then narrow down to a single device
        3. **Page** through the results five at a time
        """)

    st.markdown("---")

    col1, col2 = st.columns([1, 2])
    with col1:
        st.markdown("### ⚡ Act")
    with col2:
        st.markdown("""
        1. **Upload** a new binary with its version, description and target device
        2. **Select** rows to download or delete several firmwares at once
        3. **Export** the current project/device scope to an Excel workbook
        """)


def render_login_help_content():
    st.markdown("""
    ### 🔐 Login
    Paste the bearer token issued by the firmware backend. It is checked
    against the backend before it is stored on this machine.
    """)
