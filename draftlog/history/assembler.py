"""Collects emitted versions into per-path chronological histories."""

from __future__ import annotations

import logging
from collections import defaultdict

from draftlog.history.models import Change, ExtractionResult, FileHistory, FileVersion

logger = logging.getLogger(__name__)


class VersionAssembler:
    """Accumulates versions in any order and sorts them once at the end."""

    def __init__(self) -> None:
        self._versions: dict[str, list[tuple[int, FileVersion]]] = defaultdict(list)
        self._skipped: dict[str, int] = defaultdict(int)

    def add(self, change: Change, version: FileVersion) -> None:
        self._versions[change.path].append((change.sequence, version))

    def skip(self, path: str) -> None:
        """Record a version that could not be retrieved or decoded."""
        self._skipped[path] += 1

    @property
    def skipped(self) -> int:
        return sum(self._skipped.values())

    def finalize(
        self,
        total_commits: int,
        processed_commits: int | None = None,
        cancelled: bool = False,
    ) -> ExtractionResult:
        """Sort every history by (timestamp, commit order) and package the result."""
        files: list[FileHistory] = []
        for path in sorted(self._versions):
            entries = sorted(self._versions[path], key=lambda e: (e[1].timestamp, e[0]))
            history = FileHistory(path=path, versions=[v for _, v in entries])
            self._verify(history)
            files.append(history)

        return ExtractionResult(
            files=files,
            total_commits=total_commits,
            processed_commits=total_commits if processed_commits is None else processed_commits,
            skipped_versions=self.skipped,
            cancelled=cancelled,
        )

    def _verify(self, history: FileHistory) -> None:
        # Adjacent duplicates can only come from skipped versions or
        # commit timestamps that disagree with log order.
        for prev, cur in zip(history.versions, history.versions[1:]):
            if cur.object_id == prev.object_id:
                logger.error(
                    "%s: adjacent versions %s and %s share object %s (%d skipped)",
                    history.path, prev.commit_id[:12], cur.commit_id[:12],
                    cur.object_id[:12], self._skipped.get(history.path, 0),
                )
