"""Tests for auth.py — sessions, OAuth states, redirect and bearer checks."""

import time

from eris_site.auth import SessionStore, StateStore, sanitize_next_path, verify_bearer


def test_session_create_and_get():
    store = SessionStore()

    token = store.create({"id": "1", "username": "alice"}, "access")

    session = store.get(token)
    assert session.access_token == "access"
    assert session.display_name == "alice"
    assert len(store) == 1


def test_session_display_name_prefers_global_name():
    store = SessionStore()
    token = store.create({"id": "1", "username": "alice", "global_name": "Alice A."}, "t")

    assert store.get(token).display_name == "Alice A."


def test_session_unknown_token():
    store = SessionStore()

    assert store.get("nope") is None
    assert store.get(None) is None


def test_session_drop():
    store = SessionStore()
    token = store.create({"id": "1"}, "t")

    store.drop(token)

    assert store.get(token) is None


def test_session_expires(monkeypatch):
    store = SessionStore(ttl=60)
    token = store.create({"id": "1"}, "t")
    later = time.time() + 61
    monkeypatch.setattr(time, "time", lambda: later)

    assert store.get(token) is None
    assert len(store) == 0


def test_state_single_use():
    states = StateStore()
    state = states.issue("/embed")

    assert states.consume(state) == "/embed"
    assert states.consume(state) is None


def test_state_unknown():
    assert StateStore().consume("forged") is None


def test_state_expires(monkeypatch):
    states = StateStore(ttl=10)
    state = states.issue()
    later = time.time() + 11
    monkeypatch.setattr(time, "time", lambda: later)

    assert states.consume(state) is None


def test_sanitize_next_path():
    assert sanitize_next_path("/commands?category=utility") == "/commands?category=utility"
    assert sanitize_next_path("https://evil.example") == "/"
    assert sanitize_next_path("//evil.example") == "/"
    assert sanitize_next_path("/\\evil.example") == "/"
    assert sanitize_next_path("") == "/"


def test_verify_bearer():
    assert verify_bearer("Bearer s3cret", "s3cret")
    assert not verify_bearer("Bearer wrong", "s3cret")
    assert not verify_bearer("s3cret", "s3cret")
    assert not verify_bearer("", "s3cret")
