"""Session storage subsystem."""

from draftlog.config.models import SessionConfig
from draftlog.storage.filesystem import FileSessionStore
from draftlog.storage.models import (
    SessionInfo,
    SessionNotFoundError,
    SessionStore,
    validate_session_id,
)
from draftlog.storage.sqlite import SQLiteSessionStore


def create_session_store(config: SessionConfig) -> SessionStore:
    """Create the session store selected by ``config.backend``."""
    if config.backend == "sqlite":
        return SQLiteSessionStore(config.db_path)
    return FileSessionStore(config.directory)


__all__ = [
    "FileSessionStore",
    "SQLiteSessionStore",
    "SessionInfo",
    "SessionNotFoundError",
    "SessionStore",
    "create_session_store",
    "validate_session_id",
]
