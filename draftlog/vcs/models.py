"""Pydantic models and errors for repository access."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Commit(BaseModel):
    """A single commit as read from the repository log."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1, description="Commit SHA")
    timestamp: datetime = Field(description="Committer time, UTC")
    author: str = ""
    message: str = ""
    tree_id: str = ""


class TreeEntry(BaseModel):
    """A file or directory in a commit tree."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    type: Literal["tree", "blob"]
    sha: str


class ObjectStoreError(Exception):
    """Wraps repository access failures with context."""

    def __init__(self, operation: str, message: str, cause: Exception | None = None) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")
        if cause is not None:
            self.__cause__ = cause


class RepositoryNotFoundError(ObjectStoreError):
    """No git repository could be opened at the requested location."""

    def __init__(self, location: str, cause: Exception | None = None) -> None:
        self.location = location
        super().__init__("open", f"no git repository at {location}", cause)


class BlobNotFoundError(ObjectStoreError):
    """A path does not resolve to a blob at the given commit."""

    def __init__(self, commit_id: str, path: str) -> None:
        self.commit_id = commit_id
        self.path = path
        super().__init__("read_blob", f"{path} not found at {commit_id[:12]}")
