"""History extraction: change detection, decode cache, batching and assembly."""

from draftlog.history.models import (
    Change,
    ExtractionError,
    ExtractionResult,
    FileHistory,
    FileVersion,
)
from draftlog.history.assembler import VersionAssembler
from draftlog.history.cache import DecodeCache
from draftlog.history.detector import ChangeDetector
from draftlog.history.scheduler import BatchScheduler
from draftlog.history.engine import (
    HistoryExtractor,
    discover_repository,
    discover_upload,
    extract_repository,
    extract_upload,
)

__all__ = [
    "BatchScheduler",
    "Change",
    "ChangeDetector",
    "DecodeCache",
    "ExtractionError",
    "ExtractionResult",
    "FileHistory",
    "FileVersion",
    "HistoryExtractor",
    "VersionAssembler",
    "discover_repository",
    "discover_upload",
    "extract_repository",
    "extract_upload",
]
