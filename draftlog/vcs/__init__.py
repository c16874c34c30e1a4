"""Repository access for draftlog."""

from pathlib import Path

from draftlog.vcs.base import ObjectStore
from draftlog.vcs.discovery import (
    IGNORED_DIRS,
    DocumentDiscovery,
    select_paths,
    should_ignore_path,
)
from draftlog.vcs.git import GitObjectStore
from draftlog.vcs.models import (
    BlobNotFoundError,
    Commit,
    ObjectStoreError,
    RepositoryNotFoundError,
    TreeEntry,
)


def open_object_store(root: str | Path) -> GitObjectStore:
    """Open the git repository rooted at *root*.

    Raises RepositoryNotFoundError if *root* is not a repository.
    """
    path = Path(root)
    if not path.is_dir():
        raise RepositoryNotFoundError(str(path))
    return GitObjectStore(path)


__all__ = [
    "BlobNotFoundError",
    "Commit",
    "DocumentDiscovery",
    "GitObjectStore",
    "IGNORED_DIRS",
    "ObjectStore",
    "ObjectStoreError",
    "RepositoryNotFoundError",
    "TreeEntry",
    "open_object_store",
    "select_paths",
    "should_ignore_path",
]
