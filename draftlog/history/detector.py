"""Change detection over per-commit object ids."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from draftlog.history.models import Change
from draftlog.vcs.base import ObjectStore
from draftlog.vcs.models import Commit

logger = logging.getLogger(__name__)


class ChangeDetector:
    """Finds the commits at which each tracked path's content changed.

    ``resolve`` performs the object-id lookups, which are independent and
    run concurrently. ``detect`` then scans commits oldest-first against the
    last object id seen for each path. That state is owned here and carried
    across successive batches, so callers must feed batches in order.
    """

    def __init__(self, store: ObjectStore, paths: Sequence[str], concurrency: int = 4) -> None:
        self.store = store
        self.paths = tuple(paths)
        self.concurrency = concurrency
        self._last_seen: dict[str, str] = {}
        self._sequence = 0

    @property
    def last_seen(self) -> Mapping[str, str]:
        return dict(self._last_seen)

    async def resolve(self, commits: Sequence[Commit]) -> dict[str, dict[str, str]]:
        """Map each commit id to ``{path: object_id}`` for paths present there."""
        results = await asyncio.gather(*(self._resolve_commit(c) for c in commits))
        return {commit.id: oids for commit, oids in zip(commits, results)}

    async def _resolve_commit(self, commit: Commit) -> dict[str, str]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _lookup(path: str) -> str | None:
            async with semaphore:
                try:
                    return await self.store.resolve_blob(commit.id, path)
                except Exception:
                    logger.warning(
                        "Could not resolve %s at %s; treating as absent",
                        path, commit.id[:12], exc_info=True,
                    )
                    return None

        oids = await asyncio.gather(*(_lookup(p) for p in self.paths))
        return {path: oid for path, oid in zip(self.paths, oids) if oid is not None}

    def detect(
        self, commits: Sequence[Commit], oid_map: Mapping[str, Mapping[str, str]]
    ) -> list[Change]:
        """Return the changes introduced by *commits*, oldest first.

        A path contributes a change when it exists at the commit and its
        object id differs from the last one seen. Deletions contribute
        nothing and do not reset the last-seen id.
        """
        changes: list[Change] = []
        for commit in commits:
            sequence = self._sequence
            self._sequence += 1
            present = oid_map.get(commit.id, {})
            for path in self.paths:
                oid = present.get(path)
                if oid is None or self._last_seen.get(path) == oid:
                    continue
                self._last_seen[path] = oid
                changes.append(Change(sequence, commit, path, oid))
        return changes
