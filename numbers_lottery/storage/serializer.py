"""Per-store FIFO write queue for a single event loop.

Each store keeps a tail future. A writer waits for the previous tail, then runs.
The outcome of the previous writer does not matter, so one failed write never
blocks the ones queued behind it. Writes to the same store run one at a time, in
the order they were enqueued. Different stores never wait on each other.

This only orders writers inside one process; it is not a file lock.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

T = TypeVar("T")


class SerializerClosedError(RuntimeError):
    pass


class WriteSerializer:
    """Chains writers per store id so they commit in submission order."""

    def __init__(self) -> None:
        self._tails: dict[str, asyncio.Future] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self, store_id: str) -> bool:
        """True while a write for ``store_id`` is queued or running."""
        tail = self._tails.get(store_id)
        return tail is not None and not tail.done()

    async def enqueue(self, store_id: str, writer: Callable[[], Awaitable[T]]) -> T:
        """Run ``writer`` after every writer previously enqueued for ``store_id``."""
        if self._closed:
            raise SerializerClosedError("Write serializer is closed")

        loop = asyncio.get_running_loop()
        previous = self._tails.get(store_id)
        done = loop.create_future()
        self._tails[store_id] = done

        try:
            if previous is not None and not previous.done():
                # shield: cancelling this caller must not cancel the predecessor's slot
                await asyncio.shield(previous)
            return await writer()
        except Exception as e:
            logger.debug("Write to {} did not commit: {}", store_id, e)
            raise
        finally:
            self._release(store_id, previous, done)

    def _release(
        self, store_id: str, previous: asyncio.Future | None, done: asyncio.Future
    ) -> None:
        if previous is not None and not previous.done():
            # Cancelled while queued: keep the chain intact behind the predecessor.
            previous.add_done_callback(lambda _: self._finish(store_id, done))
        else:
            self._finish(store_id, done)

    def _finish(self, store_id: str, done: asyncio.Future) -> None:
        if not done.done():
            done.set_result(None)
        if self._tails.get(store_id) is done:
            del self._tails[store_id]

    async def close(self) -> None:
        """Refuse new writes and wait for the queued ones to finish."""
        self._closed = True
        tails = [t for t in self._tails.values() if not t.done()]
        if tails:
            logger.info("Draining {} pending write queue(s)", len(tails))
            await asyncio.gather(*tails)
