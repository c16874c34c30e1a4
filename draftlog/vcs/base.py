"""Abstract object store interface for draftlog."""

from abc import ABC, abstractmethod

from draftlog.vcs.models import Commit, TreeEntry


class ObjectStore(ABC):
    """Read-only access to a repository's commits, trees and blobs.

    History extraction only ever consumes this interface; commit traversal,
    tree listing and blob retrieval are supplied by the implementation.
    """

    @abstractmethod
    async def list_commits(self, max_count: int | None = None) -> list[Commit]:
        """Return commits in native log order (newest first)."""
        ...

    @abstractmethod
    async def list_tree(self, commit_id: str, path: str = "") -> list[TreeEntry]:
        """List one directory level of a commit's tree.

        Args:
            commit_id: Commit SHA.
            path: Directory path within the tree (empty string for root).
        """
        ...

    @abstractmethod
    async def resolve_blob(self, commit_id: str, path: str) -> str | None:
        """Return the object id of *path* at *commit_id*, or None if absent."""
        ...

    @abstractmethod
    async def read_blob(self, commit_id: str, path: str) -> tuple[str, bytes]:
        """Return ``(object_id, raw_bytes)`` for *path* at *commit_id*.

        Raises:
            BlobNotFoundError: the path does not exist at that commit.
        """
        ...
