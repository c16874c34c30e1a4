"""FileSessionStore: one JSON document per session on disk."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from draftlog.storage.models import SessionInfo, SessionNotFoundError, validate_session_id

logger = logging.getLogger(__name__)


class FileSessionStore:
    """Stores sessions as ``<directory>/<session_id>.json``."""

    def __init__(self, directory: str | Path = "data/sessions") -> None:
        self.directory = Path(directory)

    def _path(self, session_id: str) -> Path:
        return self.directory / f"{validate_session_id(session_id)}.json"

    def save(self, session_id: str, data: dict[str, Any]) -> None:
        dest = self._path(session_id)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.info("saved session %s (%d bytes)", session_id, dest.stat().st_size)

    def load(self, session_id: str) -> dict[str, Any]:
        path = self._path(session_id)
        if not path.is_file():
            raise SessionNotFoundError(session_id)
        return json.loads(path.read_text(encoding="utf-8"))

    def list_sessions(self) -> list[SessionInfo]:
        """Stored sessions, newest first."""
        if not self.directory.is_dir():
            return []
        sessions = []
        for path in self.directory.glob("*.json"):
            stat = path.stat()
            sessions.append(
                SessionInfo(
                    session_id=path.stem,
                    created_at=datetime.fromtimestamp(stat.st_mtime, timezone.utc),
                    size=stat.st_size,
                )
            )
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)

    def delete(self, session_id: str) -> None:
        path = self._path(session_id)
        if not path.is_file():
            raise SessionNotFoundError(session_id)
        path.unlink()

    def cleanup(self, days_old: int = 30) -> int:
        """Delete sessions not modified for *days_old* days. Returns the count."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_old)
        deleted = 0
        for info in self.list_sessions():
            if info.created_at < cutoff:
                (self.directory / f"{info.session_id}.json").unlink()
                deleted += 1
        logger.info("removed %d session(s) older than %d days", deleted, days_old)
        return deleted
