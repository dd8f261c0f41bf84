# site_mirror/crawler/termination.py
"""
Termination detection for the frontier queue.

Every page URL on the frontier or in flight holds one unit of the counter.
A successful frontier send adds a unit for the new URL, a finished task
releases its own. Zero means nothing queued, nothing running and nobody
left who could enqueue, so the frontier is closed.
"""
from __future__ import annotations

import asyncio


class ProducerCounter:
    """Explicit pending-producer count with a close signal for the consumer."""

    def __init__(self, initial: int = 1) -> None:
        if initial < 0:
            raise ValueError("initial must be >= 0")
        self._count = initial
        self._closed = asyncio.Event()
        if initial == 0:
            self._closed.set()

    @property
    def count(self) -> int:
        return self._count

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def acquire(self) -> None:
        """Account for one more URL put on the frontier."""
        if self._closed.is_set():
            raise RuntimeError("frontier already closed")
        self._count += 1

    def release(self) -> None:
        """A page task has finished, whatever its outcome."""
        if self._count <= 0:
            raise RuntimeError("release() without matching acquire()")
        self._count -= 1
        if self._count == 0:
            self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()
