# firmware_admin/auth/session_store.py
"""
Session store holding the backend bearer token and the logged-in user
record.

The store writes into a per-browser mapping (st.session_state in the app),
so every connected browser keeps its own login.
"""
import logging
from datetime import datetime
from typing import Callable, MutableMapping, Optional

logger = logging.getLogger(__name__)

SESSION_KEY = "firmware_session"


class SessionExpiredError(Exception):
    """Raised after the backend rejected the session token (HTTP 401)."""
    pass


class SessionStore:
    def __init__(self, storage: MutableMapping, key: str = SESSION_KEY):
        """
        Args:
            storage: Per-client mapping, e.g. st.session_state
            key: Entry of the mapping that holds the session
        """
        self.storage = storage
        self.key = key

    def save(self, token: str, user: Optional[dict] = None) -> None:
        """
        Store a bearer token and user record.

        Raises:
            ValueError: If token is empty or None
        """
        if not token or not token.strip():
            raise ValueError("Token cannot be empty")

        self.storage[self.key] = {
            'token': token.strip(),
            'user': dict(user or {}),
            'last_updated': datetime.now().isoformat()
        }

    def load(self) -> dict:
        """Return the stored session, or an empty dict if there is none."""
        data = self.storage.get(self.key)
        if data is not None and not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session entry '{self.key}'")
            return {}
        return data or {}

    @property
    def token(self) -> Optional[str]:
        return self.load().get('token') or None

    @property
    def user(self) -> dict:
        return self.load().get('user') or {}

    def is_authenticated(self) -> bool:
        return self.token is not None

    def clear(self) -> None:
        self.storage.pop(self.key, None)


class SessionContext:
    """
    Authenticated identity handed to the firmware actions.

    `on_expired` is supplied by the host page; it is called after the
    stored session has been cleared.
    """

    def __init__(self, store: SessionStore, on_expired: Optional[Callable[[], None]] = None):
        self.store = store
        self.on_expired = on_expired

    @property
    def token(self) -> Optional[str]:
        return self.store.token

    @property
    def user(self) -> dict:
        return self.store.user

    def expire(self) -> None:
        self.store.clear()
        if self.on_expired:
            self.on_expired()
