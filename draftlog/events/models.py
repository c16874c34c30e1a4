"""Lifecycle events pushed from an extraction run to its listener."""

from __future__ import annotations

from typing import Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from draftlog.history.models import ExtractionResult


class Event(BaseModel):
    """Base event. Wire form is ``{"type": ..., "data": {...}}``."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    terminal: ClassVar[bool] = False

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"type"}, exclude_none=True)

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.type, "data": self.payload()}  # type: ignore[attr-defined]


class ProgressEvent(Event):
    type: Literal["progress"] = "progress"
    stage: Literal["uploaded", "commits", "files_found", "processing"]
    count: int | None = None
    processed: int | None = None
    total: int | None = None


class FileEvent(Event):
    type: Literal["file"] = "file"
    path: str
    version_count: int


class CompleteEvent(Event):
    type: Literal["complete"] = "complete"
    terminal: ClassVar[bool] = True
    result: ExtractionResult

    def payload(self) -> dict[str, Any]:
        return self.result.model_dump(mode="json", by_alias=True)


class CancelledEvent(Event):
    type: Literal["cancelled"] = "cancelled"
    terminal: ClassVar[bool] = True
    processed: int
    total: int


class ErrorEvent(Event):
    type: Literal["error"] = "error"
    terminal: ClassVar[bool] = True
    message: str


AnyEvent = Union[ProgressEvent, FileEvent, CompleteEvent, CancelledEvent, ErrorEvent]
