# site_mirror/crawler/downloader.py
"""
Second phase of a mirror run: drain the asset queues.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict

from site_mirror.crawler.fetcher import Fetcher
from site_mirror.crawler.models import AssetKind
from site_mirror.crawler.registry import FailureLedger
from site_mirror.errors import FetchError, WriteError
from site_mirror.writer import MirrorWriter

_LABELS = {
    AssetKind.JS_CSS: ("js & css file", "js & css files"),
    AssetKind.IMGS: ("image", "images"),
}


class ResourceDownloader:
    """Fetches every queued asset once; failures only go to the ledger."""

    def __init__(
        self,
        fetcher: Fetcher,
        writer: MirrorWriter,
        ledger: FailureLedger,
        in_flight: Dict[str, AssetKind] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.writer = writer
        self.ledger = ledger
        self.in_flight = in_flight if in_flight is not None else {}
        self.logger = logging.getLogger("SiteMirror")

    async def drain(self, queue: asyncio.Queue[str], kind: AssetKind) -> int:
        """Download everything in *queue*; nothing may be sent to it any more."""
        total = queue.qsize()
        singular, plural = _LABELS[kind]
        self.logger.info("downloading %d %s", total, singular if total == 1 else plural)
        progress = {"done": 0}

        async def _one(url: str) -> None:
            try:
                res = await self.fetcher.get(url)
                await self.writer.write(url, res.content, is_html=False)
            except (FetchError, WriteError) as exc:
                progress["done"] += 1
                self.ledger.record(kind, url)
                self.logger.warning("%s %d/%d %s", exc, progress["done"], total, url)
                del self.in_flight[url]
                return
            del self.in_flight[url]
            progress["done"] += 1
            self.logger.info("%d/%d %s", progress["done"], total, url)

        async with asyncio.TaskGroup() as tg:
            while not queue.empty():
                url = queue.get_nowait()
                self.in_flight[url] = kind
                tg.create_task(_one(url))
        return total
