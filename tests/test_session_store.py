"""Per-browser bearer token and user record."""
import pytest

from firmware_admin.auth.session_store import SESSION_KEY, SessionContext, SessionStore


def test_save_and_load():
    storage = {}
    store = SessionStore(storage)
    assert not store.is_authenticated()
    store.save("  abc  ", {"name": "Ada"})
    assert store.is_authenticated()
    assert store.token == "abc"
    assert store.user == {"name": "Ada"}
    assert "last_updated" in storage[SESSION_KEY]


def test_empty_token_is_rejected():
    store = SessionStore({})
    with pytest.raises(ValueError):
        store.save("   ")


def test_clear_removes_session():
    storage = {"theme": "dark"}
    store = SessionStore(storage)
    store.save("abc")
    store.clear()
    assert store.token is None
    assert store.user == {}
    assert storage == {"theme": "dark"}
    store.clear()


def test_browsers_do_not_share_a_login():
    alice_browser, other_browser = {}, {}
    SessionStore(alice_browser).save("alice-token", {"name": "Alice"})

    stranger = SessionStore(other_browser)
    assert not stranger.is_authenticated()
    assert stranger.token is None
    assert stranger.user == {}

    stranger.save("bob-token", {"name": "Bob"})
    stranger.clear()
    assert SessionStore(alice_browser).token == "alice-token"


def test_same_browser_sees_its_login_on_every_run():
    browser = {}
    SessionStore(browser).save("abc", {"email": "ada@example.com"})
    next_run = SessionStore(browser)
    assert next_run.is_authenticated()
    assert next_run.user["email"] == "ada@example.com"


def test_malformed_entry_counts_as_logged_out():
    store = SessionStore({SESSION_KEY: ["token"]})
    assert store.load() == {}
    assert not store.is_authenticated()


def test_expire_clears_store_then_notifies():
    store = SessionStore({})
    store.save("abc", {"email": "ada@example.com"})
    seen = []
    context = SessionContext(store, on_expired=lambda: seen.append(store.token))
    assert context.token == "abc"
    assert context.user["email"] == "ada@example.com"
    context.expire()
    assert seen == [None]


def test_expire_without_callback():
    store = SessionStore({})
    store.save("abc")
    SessionContext(store).expire()
    assert not store.is_authenticated()
