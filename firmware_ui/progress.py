# firmware_ui/progress.py
"""
Helpers for bulk action progress and the downloads offered to the user.
"""
import zipfile
from io import BytesIO
from typing import List, Tuple

import pandas as pd
import streamlit as st

from firmware_admin.external.bulk import ItemResult
from firmware_ui.layout import short_key


class BulkProgress:
    """
    Progress bar and status line for one bulk action.

    Pass `callback` to BulkTaskRunner-backed actions as progress_callback.
    """

    def __init__(self, verb: str):
        """
        Args:
            verb: Action shown in the status line (e.g. "Downloading")
        """
        self.verb = verb
        self.progress_placeholder = st.empty()
        self.status_placeholder = st.empty()

    def callback(self, result: ItemResult, done: int, total: int):
        self.progress_placeholder.progress(done / total if total else 1.0)
        if result.ok:
            self.status_placeholder.info(f"{self.verb} {done}/{total}: {result.item}")
        else:
            self.status_placeholder.warning(f"{self.verb} {done}/{total}: {result.item} failed")

    def clear(self):
        self.progress_placeholder.empty()
        self.status_placeholder.empty()


def save_to_pending_downloads(file_name: str, content: bytes):
    """Saver for FirmwareActions: queue a file for a download button."""
    st.session_state.setdefault("pending_downloads", []).append((file_name, content))


def _unique_names(files: List[Tuple[str, bytes]]) -> List[Tuple[str, bytes]]:
    seen = {}
    unique = []
    for name, content in files:
        count = seen.get(name, 0)
        seen[name] = count + 1
        if count:
            stem, dot, ext = name.rpartition(".")
            name = f"{stem}_{count}.{ext}" if dot else f"{name}_{count}"
        unique.append((name, content))
    return unique


def build_downloads_zip(files: List[Tuple[str, bytes]]) -> bytes:
    zip_buffer = BytesIO()
    with zipfile.ZipFile(zip_buffer, 'w', zipfile.ZIP_DEFLATED) as zipf:
        for name, content in _unique_names(files):
            zipf.writestr(name, content)
    zip_buffer.seek(0)
    return zip_buffer.read()


def render_pending_downloads():
    """Show a download button per fetched binary, plus a zip of all of them."""
    files = st.session_state.get("pending_downloads") or []
    if not files:
        return

    st.markdown("#### ⬇️ Ready to save")
    for index, (name, content) in enumerate(files):
        st.download_button(
            f"💾 {name}",
            content,
            name,
            mime="application/octet-stream",
            key=short_key("pending_download", index, name),
        )

    col_zip, col_clear = st.columns([1, 1])
    with col_zip:
        if len(files) > 1:
            st.download_button(
                "📦 Download all as ZIP",
                build_downloads_zip(files),
                f"firmwares_{pd.Timestamp.now().strftime('%Y%m%d_%H%M%S')}.zip",
                mime="application/zip",
                key="pending_downloads_zip",
            )
    with col_clear:
        if st.button("🗑️ Clear downloads", key="clear_pending_downloads"):
            st.session_state["pending_downloads"] = []
            st.rerun()
