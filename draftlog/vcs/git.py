"""Local git object store using GitPython."""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from draftlog.vcs.base import ObjectStore
from draftlog.vcs.models import (
    BlobNotFoundError,
    Commit,
    ObjectStoreError,
    RepositoryNotFoundError,
    TreeEntry,
)

logger = logging.getLogger(__name__)


class GitObjectStore(ObjectStore):
    """ObjectStore over a local repository using GitPython.

    GitPython is synchronous, so all blocking calls are wrapped with
    asyncio.to_thread(). A single Repo shares its cat-file helper
    processes between callers, so access to it is serialised by a lock.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._lock = threading.Lock()
        try:
            self._repo = Repo(self.root)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryNotFoundError(str(self.root), e) from e

    def close(self) -> None:
        """Release the helper processes held by the repository."""
        with self._lock:
            self._repo.close()

    @staticmethod
    def _to_commit(commit) -> Commit:
        return Commit(
            id=commit.hexsha,
            timestamp=datetime.fromtimestamp(commit.committed_date, tz=timezone.utc),
            author=commit.author.name or "",
            message=commit.message.strip(),
            tree_id=commit.tree.hexsha,
        )

    async def list_commits(self, max_count: int | None = None) -> list[Commit]:
        """Walk the log from HEAD, newest first."""

        def _sync() -> list[Commit]:
            kwargs = {"max_count": max_count} if max_count else {}
            with self._lock:
                try:
                    return [self._to_commit(c) for c in self._repo.iter_commits(**kwargs)]
                except ValueError:
                    # HEAD does not point at a commit yet
                    logger.debug("no commits reachable from HEAD in %s", self.root)
                    return []
                except GitCommandError as e:
                    raise ObjectStoreError("list_commits", str(e), e) from e

        return await asyncio.to_thread(_sync)

    async def list_tree(self, commit_id: str, path: str = "") -> list[TreeEntry]:
        """List files and directories at a path in the commit's tree."""

        def _sync() -> list[TreeEntry]:
            with self._lock:
                tree = self._repo.commit(commit_id).tree
                if path:
                    tree = tree / path
                return [
                    TreeEntry(path=obj.path, name=obj.name, type=obj.type, sha=obj.hexsha)
                    for obj in tree
                    # submodules show up as "commit" entries
                    if obj.type in ("tree", "blob")
                ]

        return await asyncio.to_thread(_sync)

    async def resolve_blob(self, commit_id: str, path: str) -> str | None:
        """Return the blob SHA for a path, None if it is not a file there."""

        def _sync() -> str | None:
            with self._lock:
                try:
                    obj = self._repo.commit(commit_id).tree / path
                except KeyError:
                    return None
                return obj.hexsha if obj.type == "blob" else None

        return await asyncio.to_thread(_sync)

    async def read_blob(self, commit_id: str, path: str) -> tuple[str, bytes]:
        """Fetch a blob's SHA and raw content."""

        def _sync() -> tuple[str, bytes]:
            with self._lock:
                try:
                    obj = self._repo.commit(commit_id).tree / path
                except KeyError:
                    raise BlobNotFoundError(commit_id, path) from None
                if obj.type != "blob":
                    raise BlobNotFoundError(commit_id, path)
                return obj.hexsha, obj.data_stream.read()

        return await asyncio.to_thread(_sync)
