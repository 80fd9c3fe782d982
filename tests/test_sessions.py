"""Tests for the SQLite session store."""

import sqlite3
from unittest.mock import patch

import pytest

from newsrag import SQLiteSessionStore, UpstreamError, ValidationError
from newsrag.sessions import TTL_MISSING


def test_append_and_read_messages_in_order(session_store):
    session_store.append_message("s1", "user", "Hello")
    session_store.append_message("s1", "assistant", "Hi there")

    messages = session_store.get_messages("s1")

    assert [(m.role, m.content) for m in messages] == [
        ("user", "Hello"),
        ("assistant", "Hi there"),
    ]


def test_append_returns_message_with_utc_timestamp(session_store):
    message = session_store.append_message("s1", "user", "Hello")

    assert message.timestamp == "2023-11-14T22:13:20+00:00"
    assert message.to_dict() == {
        "role": "user",
        "content": "Hello",
        "timestamp": "2023-11-14T22:13:20+00:00",
    }


def test_sessions_are_isolated(session_store):
    session_store.append_message("s1", "user", "first")
    session_store.append_message("s2", "user", "second")

    assert [m.content for m in session_store.get_messages("s1")] == ["first"]
    assert [m.content for m in session_store.get_messages("s2")] == ["second"]


def test_unknown_session_reads_empty(session_store):
    assert session_store.get_messages("missing") == []
    assert session_store.get_ttl("missing") == TTL_MISSING
    assert not session_store.session_exists("missing")


@pytest.mark.parametrize("role", ["system", "", None])
def test_append_rejects_invalid_role(session_store, role):
    with pytest.raises(ValidationError, match="Invalid role"):
        session_store.append_message("s1", role, "text")


@pytest.mark.parametrize("content", ["", None, 12])
def test_append_rejects_invalid_content(session_store, content):
    with pytest.raises(ValidationError, match="Invalid message format"):
        session_store.append_message("s1", "user", content)


def test_ttl_counts_down_and_resets_on_write(session_store, fake_clock):
    session_store.append_message("s1", "user", "Hello")
    assert session_store.get_ttl("s1") == 1800

    fake_clock.advance(600)
    assert session_store.get_ttl("s1") == 1200

    session_store.append_message("s1", "assistant", "Reply")
    assert session_store.get_ttl("s1") == 1800


def test_session_expires_after_ttl(session_store, fake_clock):
    session_store.append_message("s1", "user", "Hello")

    fake_clock.advance(1800)

    assert session_store.get_messages("s1") == []
    assert session_store.get_ttl("s1") == TTL_MISSING


def test_write_after_expiry_starts_fresh_session(session_store, fake_clock):
    session_store.append_message("s1", "user", "old")
    fake_clock.advance(2000)

    session_store.append_message("s1", "user", "new")

    assert [m.content for m in session_store.get_messages("s1")] == ["new"]


def test_clear_session(session_store):
    session_store.append_message("s1", "user", "Hello")

    assert session_store.clear_session("s1") is True
    assert session_store.get_messages("s1") == []
    assert session_store.clear_session("s1") is False


def test_refresh_session_extends_live_session(session_store, fake_clock):
    session_store.append_message("s1", "user", "Hello")
    fake_clock.advance(1000)

    assert session_store.refresh_session("s1") is True
    assert session_store.get_ttl("s1") == 1800
    assert session_store.refresh_session("missing") is False


def test_store_persists_across_instances(tmp_path, fake_clock):
    db_path = tmp_path / "sessions.db"
    SQLiteSessionStore(db_path, clock=fake_clock).append_message("s1", "user", "x")

    reopened = SQLiteSessionStore(db_path, clock=fake_clock)

    assert [m.content for m in reopened.get_messages("s1")] == ["x"]


def test_rejects_non_positive_ttl(tmp_path):
    with pytest.raises(ValueError, match="ttl_seconds"):
        SQLiteSessionStore(tmp_path / "sessions.db", ttl_seconds=0)


def test_database_errors_become_upstream_errors(session_store):
    with (
        patch.object(
            session_store, "_connect", side_effect=sqlite3.OperationalError("locked")
        ),
        pytest.raises(UpstreamError, match="locked"),
    ):
        session_store.get_messages("s1")
