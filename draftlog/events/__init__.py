"""Lifecycle events and their transports."""

from draftlog.events.models import (
    AnyEvent,
    CancelledEvent,
    CompleteEvent,
    ErrorEvent,
    Event,
    FileEvent,
    ProgressEvent,
)
from draftlog.events.reporter import EventCallback, EventChannel, ProgressReporter
from draftlog.events.sse import SSE_HEADERS, format_sse, stream_events

__all__ = [
    "AnyEvent",
    "CancelledEvent",
    "CompleteEvent",
    "ErrorEvent",
    "Event",
    "EventCallback",
    "EventChannel",
    "FileEvent",
    "ProgressEvent",
    "ProgressReporter",
    "SSE_HEADERS",
    "format_sse",
    "stream_events",
]
