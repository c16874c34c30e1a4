"""Session storage interface and models."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

_SESSION_ID_RE = re.compile(r"[\w\-.@]+")


class SessionInfo(BaseModel):
    """Listing entry for a stored session."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    created_at: datetime
    size: int


class SessionNotFoundError(LookupError):
    """No session is stored under the requested id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


def validate_session_id(session_id: str) -> str:
    """Reject ids that are unsafe as a filename or primary key."""
    if not _SESSION_ID_RE.fullmatch(session_id) or session_id.strip(".") == "":
        raise ValueError(f"Invalid session id {session_id!r}")
    if ".." in session_id:
        raise ValueError(f"Invalid session id {session_id!r}")
    return session_id


@runtime_checkable
class SessionStore(Protocol):
    """Persistence for extraction results between requests."""

    def save(self, session_id: str, data: dict[str, Any]) -> None: ...

    def load(self, session_id: str) -> dict[str, Any]: ...

    def list_sessions(self) -> list[SessionInfo]: ...

    def delete(self, session_id: str) -> None: ...

    def cleanup(self, days_old: int = 30) -> int: ...
