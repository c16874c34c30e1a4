"""History extraction engine: commit list in, per-file version histories out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from draftlog.config.models import DraftlogConfig, HistoryConfig
from draftlog.decoder import DocumentDecoder
from draftlog.events.models import CancelledEvent, CompleteEvent, ErrorEvent, FileEvent, ProgressEvent
from draftlog.events.reporter import ProgressReporter
from draftlog.history.assembler import VersionAssembler
from draftlog.history.cache import DecodeCache
from draftlog.history.detector import ChangeDetector
from draftlog.history.models import ExtractionError, ExtractionResult
from draftlog.history.scheduler import BatchScheduler
from draftlog.staging import staging_area
from draftlog.vcs import DocumentDiscovery, open_object_store, select_paths
from draftlog.vcs.base import ObjectStore
from draftlog.vcs.models import Commit, RepositoryNotFoundError

logger = logging.getLogger(__name__)


def _report(reporter: ProgressReporter, error: ExtractionError) -> ExtractionError:
    """Emit *error* on the event channel unless it already went out."""
    if not error.reported:
        reporter.emit(ErrorEvent(message=str(error)))
        error.reported = True
    return error


class HistoryExtractor:
    """Extracts document histories from one object store.

    Each call to :meth:`extract` builds its own detector, cache and
    assembler, so one extractor (or several) can run concurrently without
    sharing state.

    Pipeline:
        commits -> discovery at newest commit -> path filter ->
        BatchScheduler(ChangeDetector, DecodeCache) -> VersionAssembler
    """

    def __init__(
        self,
        store: ObjectStore,
        config: HistoryConfig | None = None,
        reporter: ProgressReporter | None = None,
        decoder: DocumentDecoder | None = None,
    ) -> None:
        self.store = store
        self.config = config or HistoryConfig()
        self.reporter = reporter or ProgressReporter()
        self.decoder = decoder or DocumentDecoder(
            self.config.content_part, self.config.fallback_chars
        )

    async def discover(self) -> list[str]:
        """Return candidate document paths at the newest commit, sorted."""
        try:
            commits = await self._list_commits(max_count=1)
            return await self._discover(commits[0])
        except ExtractionError as e:
            raise _report(self.reporter, e)

    async def extract(
        self,
        selected: Iterable[str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ExtractionResult:
        """Run a full extraction.

        Raises:
            ExtractionError: the commit list or candidate files could not be
                obtained. Reported once as an ``error`` event.
        """
        try:
            return await self._extract(selected, cancel)
        except ExtractionError as e:
            raise _report(self.reporter, e)
        except Exception as e:
            error = ExtractionError("extract", f"Extraction failed: {e}")
            raise _report(self.reporter, error) from e

    async def _list_commits(self, max_count: int) -> list[Commit]:
        try:
            commits = await self.store.list_commits(max_count=max_count)
        except Exception as e:
            raise ExtractionError("commits", f"Failed to read commit history: {e}") from e
        if not commits:
            raise ExtractionError("commits", "No commits found")
        return commits

    async def _discover(self, newest: Commit) -> list[str]:
        discovery = DocumentDiscovery(
            self.store, self.config.extension, self.config.ignored_dirs
        )
        try:
            return await discovery.discover(newest.id)
        except Exception as e:
            raise ExtractionError("discover", f"Failed to list files at {newest.id[:12]}: {e}") from e

    async def _extract(
        self, selected: Iterable[str] | None, cancel: asyncio.Event | None
    ) -> ExtractionResult:
        cfg = self.config
        commits = await self._list_commits(cfg.max_commits)
        logger.info("Found %d commits", len(commits))
        self.reporter.emit(ProgressEvent(stage="commits", count=len(commits)))

        candidates = await self._discover(commits[0])
        paths = select_paths(candidates, selected)
        if not paths:
            raise ExtractionError("discover", f"No {cfg.extension} files to process")
        logger.info(
            "Found %d %s files, processing %d", len(candidates), cfg.extension, len(paths)
        )
        self.reporter.emit(ProgressEvent(stage="files_found", count=len(paths)))

        # The log is newest first; everything downstream runs oldest first
        chronological = list(reversed(commits))
        cache = DecodeCache(self.decoder)
        assembler = VersionAssembler()
        scheduler = BatchScheduler(
            self.store,
            ChangeDetector(self.store, paths, cfg.concurrency),
            cache,
            assembler,
            self.reporter,
            batch_size=cfg.batch_size,
            concurrency=cfg.concurrency,
        )
        processed = await scheduler.run(chronological, cancel)
        cancelled = processed < len(commits)

        result = assembler.finalize(len(commits), processed, cancelled)
        for history in result.files:
            self.reporter.emit(FileEvent(path=history.path, version_count=len(history.versions)))

        versions = result.version_count
        logger.info(
            "Commits: %d, Files: %d, Versions: %d, Skipped: %d",
            len(commits), len(result.files), versions, result.skipped_versions,
        )
        if versions:
            logger.info(
                "Decoded %d unique contents (%.1f%% deduplication, %d cache hits)",
                cache.decodes, (1 - cache.decodes / versions) * 100, cache.hits,
            )

        if cancelled:
            self.reporter.emit(CancelledEvent(processed=processed, total=len(commits)))
        else:
            self.reporter.emit(CompleteEvent(result=result))
        return result


async def _open(root: str | Path, reporter: ProgressReporter) -> ObjectStore:
    try:
        return await asyncio.to_thread(open_object_store, root)
    except RepositoryNotFoundError as e:
        raise _report(reporter, ExtractionError("open", str(e))) from e


async def extract_repository(
    root: str | Path,
    config: DraftlogConfig | None = None,
    selected: Iterable[str] | None = None,
    reporter: ProgressReporter | None = None,
    cancel: asyncio.Event | None = None,
) -> ExtractionResult:
    """Extract document histories from the local repository at *root*."""
    cfg = config or DraftlogConfig()
    reporter = reporter or ProgressReporter()
    store = await _open(root, reporter)
    try:
        return await HistoryExtractor(store, cfg.history, reporter).extract(selected, cancel)
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()


async def discover_repository(
    root: str | Path, config: DraftlogConfig | None = None
) -> list[str]:
    """List candidate documents at the newest commit of *root*."""
    cfg = config or DraftlogConfig()
    reporter = ProgressReporter()
    store = await _open(root, reporter)
    try:
        return await HistoryExtractor(store, cfg.history, reporter).discover()
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()


async def extract_upload(
    files: Mapping[str, bytes],
    config: DraftlogConfig | None = None,
    selected: Iterable[str] | None = None,
    reporter: ProgressReporter | None = None,
    cancel: asyncio.Event | None = None,
) -> ExtractionResult:
    """Stage an uploaded working copy, extract from it, then remove it."""
    cfg = config or DraftlogConfig()
    reporter = reporter or ProgressReporter()
    try:
        with staging_area(files, cfg.staging.base_dir, cfg.history.ignored_dirs) as staged:
            reporter.emit(ProgressEvent(stage="uploaded", count=staged.written))
            return await extract_repository(staged.root, cfg, selected, reporter, cancel)
    except RepositoryNotFoundError as e:
        raise _report(reporter, ExtractionError("open", "No .git directory found")) from e
    except OSError as e:
        raise _report(reporter, ExtractionError("stage", f"Failed to stage upload: {e}")) from e


async def discover_upload(
    files: Mapping[str, bytes], config: DraftlogConfig | None = None
) -> list[str]:
    """Stage an uploaded working copy and list its candidate documents."""
    cfg = config or DraftlogConfig()
    try:
        with staging_area(files, cfg.staging.base_dir, cfg.history.ignored_dirs) as staged:
            return await discover_repository(staged.root, cfg)
    except RepositoryNotFoundError as e:
        raise ExtractionError("open", "No .git directory found") from e
    except OSError as e:
        raise ExtractionError("stage", f"Failed to stage upload: {e}") from e
