"""Chat session storage with time-to-live expiry."""

from __future__ import annotations

import datetime
import math
import sqlite3
import time
from collections.abc import Callable
from pathlib import Path

from .config import config
from .errors import UpstreamError, ValidationError
from .models import ChatMessage

logger = config.get_logger(__name__)

VALID_ROLES = ("user", "assistant")

# Same sentinel the TTL query of a key-value store returns for a missing key.
TTL_MISSING = -2


class SQLiteSessionStore:
    """Stores ordered chat messages per session in SQLite.

    Every write pushes the session expiry to ``now + ttl_seconds``; an expired
    session reads as missing and is purged lazily.
    """

    def __init__(
        self,
        db_path: Path = Path("data/sessions.db"),
        ttl_seconds: int = 1800,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the session store.

        Args:
            db_path: SQLite database file.
            ttl_seconds: Session lifetime after the latest write.
            clock: Source of the current UNIX time, injectable for tests.
        """
        if ttl_seconds <= 0:
            msg = f"ttl_seconds must be positive, got {ttl_seconds}"
            raise ValueError(msg)
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(exist_ok=True, parents=True)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._create_tables()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _create_tables(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    session_id TEXT PRIMARY KEY,
                    expires_at REAL NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    role TEXT NOT NULL CHECK(role IN ('user', 'assistant')),
                    content TEXT NOT NULL,
                    timestamp TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_messages_session "
                "ON messages(session_id, id)"
            )
            conn.commit()

    def _live_expiry(self, cursor: sqlite3.Cursor, session_id: str) -> float | None:
        """Return the expiry of a live session, purging it if it has expired."""
        cursor.execute(
            "SELECT expires_at FROM sessions WHERE session_id = ?", (session_id,)
        )
        row = cursor.fetchone()
        if row is None:
            return None
        expires_at = float(row[0])
        if expires_at <= self._clock():
            self._purge(cursor, session_id)
            logger.debug("Session %s expired", session_id)
            return None
        return expires_at

    @staticmethod
    def _purge(cursor: sqlite3.Cursor, session_id: str) -> int:
        cursor.execute("DELETE FROM messages WHERE session_id = ?", (session_id,))
        cursor.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
        return cursor.rowcount

    def append_message(self, session_id: str, role: str, content: str) -> ChatMessage:
        """Append a timestamped message and reset the session TTL.

        Returns:
            The stored message.

        Raises:
            ValidationError: On an unknown role or empty content.
            UpstreamError: If the database write fails.
        """
        if role not in VALID_ROLES:
            msg = 'Invalid role. Must be "user" or "assistant"'
            raise ValidationError(msg)
        if not isinstance(content, str) or not content:
            msg = "Invalid message format. Required: { role, content }"
            raise ValidationError(msg)

        now = self._clock()
        message = ChatMessage(
            role=role,  # type: ignore[arg-type]
            content=content,
            timestamp=datetime.datetime.fromtimestamp(now, tz=datetime.UTC).isoformat(),
        )
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                self._live_expiry(cursor, session_id)
                cursor.execute(
                    "INSERT INTO messages (session_id, role, content, timestamp) "
                    "VALUES (?, ?, ?, ?)",
                    (session_id, message.role, message.content, message.timestamp),
                )
                cursor.execute(
                    """
                    INSERT INTO sessions (session_id, expires_at) VALUES (?, ?)
                    ON CONFLICT(session_id)
                    DO UPDATE SET expires_at = excluded.expires_at
                    """,
                    (session_id, now + self.ttl_seconds),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.exception("Error appending message to session %s", session_id)
            msg = f"Failed to append message to session {session_id}: {exc}"
            raise UpstreamError(msg) from exc

        logger.debug("Message appended to session %s", session_id)
        return message

    def get_messages(self, session_id: str) -> list[ChatMessage]:
        """Return the ordered messages of a live session, or ``[]``.

        Raises:
            UpstreamError: If the database read fails.
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                if self._live_expiry(cursor, session_id) is None:
                    conn.commit()
                    return []
                cursor.execute(
                    "SELECT role, content, timestamp FROM messages "
                    "WHERE session_id = ? ORDER BY id",
                    (session_id,),
                )
                rows = cursor.fetchall()
        except sqlite3.Error as exc:
            logger.exception("Error getting session %s", session_id)
            msg = f"Failed to read session {session_id}: {exc}"
            raise UpstreamError(msg) from exc

        return [
            ChatMessage(role=row[0], content=row[1], timestamp=row[2]) for row in rows
        ]

    def clear_session(self, session_id: str) -> bool:
        """Delete a session.

        Returns:
            True if a live session was deleted, False if it did not exist.
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                existed = self._live_expiry(cursor, session_id) is not None
                self._purge(cursor, session_id)
                conn.commit()
        except sqlite3.Error as exc:
            logger.exception("Error clearing session %s", session_id)
            msg = f"Failed to clear session {session_id}: {exc}"
            raise UpstreamError(msg) from exc

        if existed:
            logger.info("Session %s cleared", session_id)
        else:
            logger.info("Session %s does not exist", session_id)
        return existed

    def session_exists(self, session_id: str) -> bool:
        return self.get_ttl(session_id) != TTL_MISSING

    def get_ttl(self, session_id: str) -> int:
        """Return the remaining lifetime in whole seconds, or -2 if missing."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                expires_at = self._live_expiry(cursor, session_id)
                conn.commit()
        except sqlite3.Error as exc:
            logger.exception("Error getting TTL for session %s", session_id)
            msg = f"Failed to read TTL of session {session_id}: {exc}"
            raise UpstreamError(msg) from exc

        if expires_at is None:
            return TTL_MISSING
        return math.ceil(expires_at - self._clock())

    def refresh_session(self, session_id: str) -> bool:
        """Extend a live session to a full TTL without writing a message.

        Returns:
            True if the session existed and was extended.
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                if self._live_expiry(cursor, session_id) is None:
                    conn.commit()
                    return False
                cursor.execute(
                    "UPDATE sessions SET expires_at = ? WHERE session_id = ?",
                    (self._clock() + self.ttl_seconds, session_id),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.exception("Error refreshing session %s", session_id)
            msg = f"Failed to refresh session {session_id}: {exc}"
            raise UpstreamError(msg) from exc
        return True
