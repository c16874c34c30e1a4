"""Document discovery: walks a commit tree for tracked document files."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from draftlog.vcs.base import ObjectStore
from draftlog.vcs.models import TreeEntry

logger = logging.getLogger(__name__)

# Directory names whose contents are never tracked or even read.
IGNORED_DIRS: tuple[str, ...] = ("Archive", "Private", ".automation")

DEFAULT_EXTENSION = ".ulyz"


def should_ignore_path(path: str, ignored_dirs: Iterable[str] = IGNORED_DIRS) -> bool:
    """Check if a path sits under one of the ignored directory names.

    A name matches as a leading segment (``Archive/...``) or an interior
    one (``.../Archive/...``). Pass directories with a trailing slash.
    """
    for name in ignored_dirs:
        if path.startswith(f"{name}/") or f"/{name}/" in path:
            return True
    return False


def select_paths(candidates: Sequence[str], selected: Iterable[str] | None) -> list[str]:
    """Restrict candidates to the selected paths; no selection keeps all."""
    wanted = set(selected or ())
    if not wanted:
        return list(candidates)
    unknown = wanted.difference(candidates)
    if unknown:
        logger.info("Ignoring %d selected path(s) not present at HEAD", len(unknown))
    return [p for p in candidates if p in wanted]


class DocumentDiscovery:
    """Finds candidate documents in a commit by filename suffix."""

    def __init__(
        self,
        store: ObjectStore,
        extension: str = DEFAULT_EXTENSION,
        ignored_dirs: Iterable[str] = IGNORED_DIRS,
    ) -> None:
        self.store = store
        self.extension = extension
        self.ignored_dirs = tuple(ignored_dirs)

    async def discover(self, commit_id: str) -> list[str]:
        """Recursively traverse the commit tree and return sorted document paths."""
        found: list[str] = []

        async def _traverse(path: str = "") -> None:
            entries = await self.store.list_tree(commit_id, path)
            for entry in entries:
                if self._skip(entry):
                    continue
                if entry.type == "tree":
                    await _traverse(entry.path)
                elif entry.name.endswith(self.extension):
                    found.append(entry.path)

        await _traverse()
        found.sort()
        logger.debug("Discovered %d %s file(s) at %s", len(found), self.extension, commit_id[:12])
        return found

    def _skip(self, entry: TreeEntry) -> bool:
        probe = f"{entry.path}/" if entry.type == "tree" else entry.path
        if should_ignore_path(probe, self.ignored_dirs):
            logger.debug("Skipping ignored path: %s", entry.path)
            return True
        return False
