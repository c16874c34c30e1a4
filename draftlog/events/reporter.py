"""Event sinks: a callback reporter and an asyncio message channel."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import cast

from draftlog.events.models import Event

logger = logging.getLogger(__name__)

EventCallback = Callable[[Event], None]


class ProgressReporter:
    """One-way sink the engine pushes events into.

    With no callback attached every emit is a no-op. A callback that raises
    (e.g. a disconnected client) is logged and never interrupts the run.
    """

    def __init__(self, callback: EventCallback | None = None) -> None:
        self._callback = callback

    def emit(self, event: Event) -> None:
        if self._callback is None:
            return
        try:
            self._callback(event)
        except Exception:
            logger.exception("Event listener failed for %s event", event.type)  # type: ignore[attr-defined]


class EventChannel:
    """Unbounded queue carrying events from the engine to a transport.

    Iteration ends after a terminal event or an explicit close().
    """

    _CLOSED = object()

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self.finished = False

    def send(self, event: Event) -> None:
        if self._closed:
            logger.debug("Dropping %s event on closed channel", event.type)  # type: ignore[attr-defined]
            return
        self._queue.put_nowait(event)
        if event.terminal:
            self.finished = True

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(self._CLOSED)

    def reporter(self) -> ProgressReporter:
        return ProgressReporter(self.send)

    async def __aiter__(self) -> AsyncIterator[Event]:
        while True:
            item = await self._queue.get()
            if item is self._CLOSED:
                return
            event = cast(Event, item)
            yield event
            if event.terminal:
                return
