"""Object-id keyed cache of decoded document text."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class DecodeCache:
    """Decodes each object id at most once per run.

    The first request for an id fetches the raw bytes and runs the decoder;
    concurrent and later requests for the same id wait on that result instead
    of fetching again. Requests for different ids never wait on each other.
    A failed fetch drops the entry and raises only in the caller that
    fetched; anyone waiting on it becomes a new owner and fetches again.
    """

    def __init__(self, decoder: Callable[[bytes], str]) -> None:
        self._decoder = decoder
        self._entries: dict[str, asyncio.Future[str]] = {}
        self.decodes = 0
        self.hits = 0

    def __len__(self) -> int:
        return sum(1 for f in self._entries.values() if f.done() and not f.cancelled())

    def __contains__(self, object_id: str) -> bool:
        return object_id in self._entries

    async def get(self, object_id: str, fetch: Callable[[], Awaitable[bytes]]) -> str:
        """Return decoded text for *object_id*, calling *fetch* only on a miss."""
        while True:
            pending = self._entries.get(object_id)
            if pending is None:
                break
            self.hits += 1
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
            except Exception:
                # another caller's fetch failed; fetch again as the new owner
                logger.debug("Retrying %s after a failed fetch", object_id[:12])

        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._entries[object_id] = future
        try:
            data = await fetch()
            text = self._decoder(data)
        except asyncio.CancelledError:
            del self._entries[object_id]
            future.cancel()
            raise
        except Exception as exc:
            del self._entries[object_id]
            future.set_exception(exc)
            # mark retrieved; waiters retry on their own
            future.exception()
            raise

        self.decodes += 1
        future.set_result(text)
        return text
