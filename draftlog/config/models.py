from pydantic import BaseModel, Field
from typing import Literal


class HistoryConfig(BaseModel):
    extension: str = Field(default=".ulyz", min_length=1)
    content_part: str = Field(default="Content.xml", min_length=1)
    ignored_dirs: list[str] = Field(
        default_factory=lambda: ["Archive", "Private", ".automation"]
    )
    batch_size: int = Field(default=10, gt=0)
    concurrency: int = Field(default=4, gt=0)
    max_commits: int = Field(default=10000, gt=0)
    fallback_chars: int = Field(default=1000, gt=0)


class StagingConfig(BaseModel):
    base_dir: str = ".tmp"


class SessionConfig(BaseModel):
    backend: Literal["filesystem", "sqlite"] = "filesystem"
    directory: str = "data/sessions"
    db_path: str = "data/sessions.db"
    retention_days: int = Field(default=30, gt=0)


class DraftlogConfig(BaseModel):
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    staging: StagingConfig = Field(default_factory=StagingConfig)
    sessions: SessionConfig = Field(default_factory=SessionConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
