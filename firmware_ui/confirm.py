# firmware_ui/confirm.py
"""
Confirmation prompt for destructive actions.

Streamlit has no blocking confirm dialog, so a request is parked in session
state, rendered as a warning with Confirm/Cancel buttons on the next run,
and handed back to the page once the user confirms.
"""
from typing import Callable, Optional

import streamlit as st

PENDING_KEY = "pending_confirmation"


def request_confirmation(action: str, message: str, target: Optional[str] = None):
    st.session_state[PENDING_KEY] = {"action": action, "message": message, "target": target}


def approved(request: dict) -> Callable[[str], bool]:
    """Confirm callback that accepts exactly the message the user confirmed."""
    return lambda message: message == request["message"]


def render_confirmation() -> Optional[dict]:
    """
    Render the pending confirmation, if any.

    Returns:
        The confirmed request, or None while nothing was confirmed
    """
    request = st.session_state.get(PENDING_KEY)
    if not request:
        return None

    st.warning(f"⚠️ {request['message']}")
    col_yes, col_no, _ = st.columns([1, 1, 4])
    with col_yes:
        if st.button("✅ Confirm", key="confirm_action", type="primary"):
            st.session_state[PENDING_KEY] = None
            return request
    with col_no:
        if st.button("✖ Cancel", key="cancel_action"):
            st.session_state[PENDING_KEY] = None
            st.rerun()
    return None
