"""Scoped staging of uploaded working-copy files on local disk."""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from draftlog.vcs.discovery import IGNORED_DIRS, should_ignore_path
from draftlog.vcs.models import RepositoryNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedRepository:
    """A staged upload and the repository root found inside it."""

    path: Path
    root: Path
    written: int
    ignored: int


def _safe_target(staging: Path, rel_path: str) -> Path | None:
    """Resolve an uploaded relative path inside *staging*, or None if unsafe."""
    pure = PurePosixPath(rel_path.replace("\\", "/"))
    if pure.is_absolute() or ".." in pure.parts or not pure.parts:
        return None
    dest = staging.joinpath(*pure.parts)
    # Guard against path traversal escaping the staging directory
    if not dest.resolve().is_relative_to(staging.resolve()):
        return None
    return dest


def write_files(
    staging: Path,
    files: Mapping[str, bytes],
    ignored_dirs: Iterable[str] = IGNORED_DIRS,
) -> tuple[int, int]:
    """Write uploaded files under *staging*. Returns ``(written, ignored)``."""
    ignored_dirs = tuple(ignored_dirs)
    written = ignored = 0
    for rel_path, data in files.items():
        if should_ignore_path(rel_path, ignored_dirs):
            ignored += 1
            continue
        dest = _safe_target(staging, rel_path)
        if dest is None:
            logger.warning("Refusing to stage unsafe path: %r", rel_path)
            ignored += 1
            continue
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        written += 1
    logger.info("Files written: %d, ignored: %d", written, ignored)
    return written, ignored


def find_repository_root(directory: Path) -> Path:
    """Return the directory holding the shallowest ``.git`` entry under *directory*."""
    candidates = sorted(directory.rglob(".git"), key=lambda p: (len(p.parts), str(p)))
    if not candidates:
        raise RepositoryNotFoundError(str(directory))
    root = candidates[0].parent
    logger.debug("Repository root: %s", root)
    return root


@contextmanager
def staging_area(
    files: Mapping[str, bytes],
    base_dir: str | Path = ".tmp",
    ignored_dirs: Iterable[str] = IGNORED_DIRS,
) -> Iterator[StagedRepository]:
    """Stage *files* in a fresh directory and remove it on every exit path.

    Raises RepositoryNotFoundError when the upload holds no ``.git`` directory.
    """
    base = Path(base_dir)
    base.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix="repo-", dir=base))
    try:
        written, ignored = write_files(staging, files, ignored_dirs)
        root = find_repository_root(staging)
        yield StagedRepository(path=staging, root=root, written=written, ignored=ignored)
    finally:
        try:
            shutil.rmtree(staging)
            logger.debug("Cleaned up staging directory %s", staging)
        except OSError:
            logger.error("Failed to clean up staging directory %s", staging, exc_info=True)
