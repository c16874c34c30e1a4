"""Batch scheduler driving change detection and decoding over the commit list."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Sequence

from draftlog.events.models import ProgressEvent
from draftlog.events.reporter import ProgressReporter
from draftlog.history.assembler import VersionAssembler
from draftlog.history.cache import DecodeCache
from draftlog.history.detector import ChangeDetector
from draftlog.history.models import Change, FileVersion
from draftlog.vcs.base import ObjectStore
from draftlog.vcs.models import Commit

logger = logging.getLogger(__name__)


class BatchScheduler:
    """Processes chronological commits in fixed-size batches.

    Per batch:
        1. resolve object ids for every (commit, path), concurrently
        2. detect changes against the last-seen ids, sequentially
        3. fetch and decode changed blobs: commits concurrently, paths
           within a commit bounded by ``concurrency``

    Batch size and concurrency only affect throughput; the assembled result
    is the same for any setting.
    """

    def __init__(
        self,
        store: ObjectStore,
        detector: ChangeDetector,
        cache: DecodeCache,
        assembler: VersionAssembler,
        reporter: ProgressReporter | None = None,
        batch_size: int = 10,
        concurrency: int = 4,
    ) -> None:
        if batch_size < 1 or concurrency < 1:
            raise ValueError("batch_size and concurrency must be positive")
        self.store = store
        self.detector = detector
        self.cache = cache
        self.assembler = assembler
        self.reporter = reporter or ProgressReporter()
        self.batch_size = batch_size
        self.concurrency = concurrency

    async def run(
        self, commits: Sequence[Commit], cancel: asyncio.Event | None = None
    ) -> int:
        """Process *commits* (oldest first). Returns how many were processed.

        *cancel* is checked between batches only; a batch in flight always
        completes.
        """
        total = len(commits)
        processed = 0
        for start in range(0, total, self.batch_size):
            if cancel is not None and cancel.is_set():
                logger.info("Extraction cancelled after %d/%d commits", processed, total)
                break
            batch = commits[start : start + self.batch_size]
            await self._run_batch(batch)
            processed = start + len(batch)
            self.reporter.emit(ProgressEvent(stage="processing", processed=processed, total=total))
        return processed

    async def _run_batch(self, batch: Sequence[Commit]) -> None:
        oid_map = await self.detector.resolve(batch)
        changes = self.detector.detect(batch, oid_map)
        if not changes:
            return

        by_commit: dict[str, list[Change]] = defaultdict(list)
        for change in changes:
            by_commit[change.commit.id].append(change)
        await asyncio.gather(*(self._run_commit(c) for c in by_commit.values()))

    async def _run_commit(self, changes: list[Change]) -> None:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _bounded(change: Change) -> None:
            async with semaphore:
                await self._process(change)

        await asyncio.gather(*(_bounded(c) for c in changes))

    async def _process(self, change: Change) -> None:
        commit = change.commit

        async def _fetch() -> bytes:
            object_id, data = await self.store.read_blob(commit.id, change.path)
            if object_id != change.object_id:
                logger.warning(
                    "%s at %s: expected object %s, read %s",
                    change.path, commit.id[:12], change.object_id[:12], object_id[:12],
                )
            return data

        try:
            content = await self.cache.get(change.object_id, _fetch)
        except Exception:
            logger.warning(
                "Skipping %s at commit %s", change.path, commit.id[:12], exc_info=True
            )
            self.assembler.skip(change.path)
            return

        self.assembler.add(
            change,
            FileVersion(
                commit_id=commit.id,
                object_id=change.object_id,
                timestamp=commit.timestamp,
                author=commit.author,
                message=commit.message,
                content=content,
            ),
        )
