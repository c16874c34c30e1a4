"""Server-sent events transport for extraction runs."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from draftlog.events.models import ErrorEvent, Event
from draftlog.events.reporter import EventChannel, ProgressReporter

logger = logging.getLogger(__name__)

SSE_HEADERS: dict[str, str] = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_sse(event: Event) -> str:
    """Render one event as an SSE ``data:`` frame."""
    return f"data: {json.dumps(event.to_wire())}\n\n"


async def stream_events(
    run: Callable[[ProgressReporter], Awaitable[object]],
) -> AsyncIterator[str]:
    """Run *run* in the background and yield its events as SSE frames.

    The stream ends after the terminal event. A failure that the run did not
    report itself is delivered as a single error frame. If the consumer
    stops iterating early the run is cancelled.
    """
    channel = EventChannel()

    async def _drive() -> None:
        try:
            await run(channel.reporter())
        except Exception as exc:
            logger.warning("Extraction stream failed: %s", exc)
            if not channel.finished:
                channel.send(ErrorEvent(message=str(exc)))
        finally:
            channel.close()

    task = asyncio.create_task(_drive())
    try:
        async for event in channel:
            yield format_sse(event)
    finally:
        if not task.done():
            task.cancel()
        await asyncio.gather(task, return_exceptions=True)
