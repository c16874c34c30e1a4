"""Pydantic models and errors for history extraction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from draftlog.vcs.models import Commit

_WIRE = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FileVersion(BaseModel):
    """One content state of a tracked document."""

    model_config = _WIRE

    commit_id: str
    object_id: str
    timestamp: datetime
    author: str = ""
    message: str = ""
    content: str


class FileHistory(BaseModel):
    """Chronological versions of a single tracked path."""

    model_config = _WIRE

    path: str
    versions: list[FileVersion] = Field(default_factory=list)


class ExtractionResult(BaseModel):
    """Outcome of one extraction run."""

    model_config = _WIRE

    files: list[FileHistory] = Field(default_factory=list)
    total_commits: int = Field(default=0, ge=0)
    processed_commits: int = Field(default=0, ge=0)
    skipped_versions: int = Field(default=0, ge=0)
    cancelled: bool = False

    @property
    def version_count(self) -> int:
        return sum(len(f.versions) for f in self.files)

    def get(self, path: str) -> FileHistory | None:
        """Return the history for *path*, or None if it has no versions."""
        for history in self.files:
            if history.path == path:
                return history
        return None


@dataclass(frozen=True)
class Change:
    """A (path, commit) pair where the path's content differs from before."""

    sequence: int
    commit: Commit
    path: str
    object_id: str


class ExtractionError(Exception):
    """Fatal failure that aborts a whole extraction run."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        self.reported = False
        super().__init__(message)
