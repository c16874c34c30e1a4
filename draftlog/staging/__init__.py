"""Upload staging subsystem."""

from draftlog.staging.workspace import (
    StagedRepository,
    find_repository_root,
    staging_area,
    write_files,
)

__all__ = [
    "StagedRepository",
    "find_repository_root",
    "staging_area",
    "write_files",
]
