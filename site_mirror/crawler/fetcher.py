# site_mirror/crawler/fetcher.py
"""
Fetcher module: the HTTP collaborator, with an optional in-flight limit.
"""
from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from typing import Optional

from aiohttp import ClientError, ClientSession
from site_mirror.crawler.models import PageData
from site_mirror.errors import StatusError, TransportError


class Fetcher:
    """Performs GET requests; only HTTP 200 counts as success."""

    def __init__(self, session: ClientSession, max_concurrency: int = 0) -> None:
        self.session = session
        self._semaphore: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None
        )

    async def get(self, url: str) -> PageData:
        """
        Fetch *url* and return its body.

        Raises StatusError for any non-200 answer and TransportError for
        connection problems and timeouts.
        """
        async with AsyncExitStack() as stack:
            if self._semaphore is not None:
                await stack.enter_async_context(self._semaphore)
            try:
                async with self.session.get(url, raise_for_status=False) as resp:
                    if resp.status != 200:
                        raise StatusError(url, resp.status)
                    ctype = resp.headers.get("Content-Type", "")
                    data = await resp.read()
                    return PageData(url, data, ctype, resp.status)
            except asyncio.TimeoutError as exc:
                raise TransportError(url, "timed out") from exc
            except ClientError as exc:
                raise TransportError(url, str(exc) or type(exc).__name__) from exc
