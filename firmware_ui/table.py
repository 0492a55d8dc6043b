# firmware_ui/table.py
import html

import streamlit as st

from firmware_admin.data.formatting import format_date, format_file_size
from firmware_admin.state.actions import CONFIRM_DELETE_ONE, FirmwareActions
from firmware_admin.state.list_state import FirmwareListState
from firmware_ui.confirm import request_confirmation
from firmware_ui.layout import short_key

COLUMN_WIDTHS = [0.5, 1.2, 3, 2.5, 1.5, 1.2]
HEADERS = ["", "Version", "Description", "Selected Device", "Date Uploaded", "Actions"]


def _sync_checkbox(key: str, value: bool):
    # Widget state follows the list state, which is the source of truth
    st.session_state[key] = value


def render_filter_indicator(state: FirmwareListState):
    if not (state.project_filter or state.device_filter):
        return
    chips = []
    if state.project_filter:
        project = state.project_name() or state.project_filter
        chips.append(f"<span class='fw-filter-chip'>Project: {html.escape(project)}</span>")
    if state.device_filter:
        device = state.device_for(state.device_filter)
        label = device.label if device else state.device_filter
        chips.append(f"<span class='fw-filter-chip'>Device: {html.escape(label)}</span>")
    st.markdown(
        f"<div class='fw-filter-indicator'>🔎 <b>Filtered by:</b>{''.join(chips)} "
        f"({len(state.filtered())} firmwares found)</div>",
        unsafe_allow_html=True,
    )


def render_firmware_table(state: FirmwareListState, actions: FirmwareActions):
    """
    Render the current page of firmwares with selection checkboxes and
    per-row download/delete actions.
    """
    rows = state.filtered_and_paged()

    header = st.columns(COLUMN_WIDTHS)
    with header[0]:
        select_all_key = "select_all_visible"
        _sync_checkbox(select_all_key, state.all_visible_selected())
        st.checkbox(
            "Select all on this page",
            key=select_all_key,
            label_visibility="collapsed",
            disabled=not rows,
            on_change=lambda: state.toggle_all_visible_selection(st.session_state[select_all_key]),
        )
    for col, title in zip(header[1:], HEADERS[1:]):
        col.markdown(f"<div class='fw-table-header'>{title}</div>", unsafe_allow_html=True)

    if not rows:
        st.markdown("<div class='fw-empty-row'>No firmwares found.</div>", unsafe_allow_html=True)
        return

    for fw in rows:
        cols = st.columns(COLUMN_WIDTHS)
        row_key = short_key("select_row", fw.id)
        with cols[0]:
            _sync_checkbox(row_key, state.is_selected(fw.id))
            st.checkbox(
                f"Select {fw.version}",
                key=row_key,
                label_visibility="collapsed",
                on_change=state.set_row_selected,
                args=(fw.id, not state.is_selected(fw.id)),
            )
        cols[1].markdown(f"<span class='fw-cell-version'>{html.escape(fw.version)}</span>", unsafe_allow_html=True)
        cols[2].markdown(html.escape(fw.description or ""))
        cols[3].markdown(html.escape(state.device_label(fw)))
        date_text = format_date(fw.uploaded_date, state.locale, state.tz_name)
        size_text = format_file_size(fw.file_size)
        cols[4].markdown(
            f"<span class='fw-cell-muted'>{date_text}<br>{size_text}</span>",
            unsafe_allow_html=True,
        )
        with cols[5]:
            col_dl, col_del = st.columns(2)
            with col_dl:
                if st.button("⬇️", key=short_key("download_one", fw.id), help="Download"):
                    with st.spinner(f"Downloading {fw.version}..."):
                        actions.download_one(fw)
                    st.rerun()
            with col_del:
                if st.button("🗑️", key=short_key("delete_one", fw.id), help="Delete"):
                    request_confirmation("delete_one", CONFIRM_DELETE_ONE, fw.id)
                    st.rerun()


def render_pagination(state: FirmwareListState):
    first, last, total = state.showing_range()
    col_text, col_prev, col_next = st.columns([6, 1, 1])
    col_text.markdown(
        f"<div class='fw-pagination-text'>Showing {first} to {last} of {total} results</div>",
        unsafe_allow_html=True,
    )
    with col_prev:
        st.button("Previous", key="page_previous", disabled=not state.can_go_previous(),
                  on_click=state.previous_page)
    with col_next:
        st.button("Next", key="page_next", disabled=not state.can_go_next(),
                  on_click=state.next_page)
