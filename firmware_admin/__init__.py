"""
ESP Firmware Admin.

Streamlit dashboard for browsing, uploading, downloading, deleting and
exporting firmware binaries of esp devices grouped into projects.
"""

__version__ = "1.0.0"
