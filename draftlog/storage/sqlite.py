"""SessionStore implementation backed by a local SQLite database."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from draftlog.storage.models import SessionInfo, SessionNotFoundError, validate_session_id

logger = logging.getLogger(__name__)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS sessions (
    session_id TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_sessions_created_at ON sessions(created_at);
"""


class SQLiteSessionStore:
    """SessionStore using SQLite with WAL mode.

    Saving an existing id replaces its data and bumps ``updated_at`` while
    keeping the original ``created_at``.
    """

    def __init__(self, db_path: str = "data/sessions.db") -> None:
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(path)
        self._conn = sqlite3.connect(self.db_path, isolation_level=None, timeout=5)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    def close(self) -> None:
        self._conn.close()

    def _now_iso(self) -> str:
        return datetime.now(UTC).isoformat()

    def save(self, session_id: str, data: dict[str, Any]) -> None:
        validate_session_id(session_id)
        now = self._now_iso()
        self._conn.execute(
            "INSERT INTO sessions (session_id, data, created_at, updated_at) "
            "VALUES (?, ?, ?, ?) "
            "ON CONFLICT(session_id) DO UPDATE SET data = excluded.data, "
            "updated_at = excluded.updated_at",
            (session_id, json.dumps(data), now, now),
        )
        logger.info("saved session %s", session_id)

    def load(self, session_id: str) -> dict[str, Any]:
        row = self._conn.execute(
            "SELECT data FROM sessions WHERE session_id = ?", (session_id,)
        ).fetchone()
        if row is None:
            raise SessionNotFoundError(session_id)
        return json.loads(row[0])

    def list_sessions(self, limit: int = 50) -> list[SessionInfo]:
        """Most recently updated sessions first."""
        rows = self._conn.execute(
            "SELECT session_id, created_at, LENGTH(data) FROM sessions "
            "ORDER BY updated_at DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [
            SessionInfo(
                session_id=session_id,
                created_at=datetime.fromisoformat(created_at),
                size=size,
            )
            for session_id, created_at, size in rows
        ]

    def delete(self, session_id: str) -> None:
        cursor = self._conn.execute(
            "DELETE FROM sessions WHERE session_id = ?", (session_id,)
        )
        if cursor.rowcount == 0:
            raise SessionNotFoundError(session_id)

    def cleanup(self, days_old: int = 30) -> int:
        """Delete sessions not updated for *days_old* days. Returns the count."""
        cutoff = (datetime.now(UTC) - timedelta(days=days_old)).isoformat()
        cursor = self._conn.execute(
            "DELETE FROM sessions WHERE updated_at < ?", (cutoff,)
        )
        logger.info("removed %d session(s) older than %d days", cursor.rowcount, days_old)
        return cursor.rowcount
