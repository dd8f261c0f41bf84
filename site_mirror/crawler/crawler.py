# === FILE: site_mirror/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from aiohttp import ClientSession, ClientTimeout

from site_mirror.config import MirrorConfig
from site_mirror.crawler.downloader import ResourceDownloader
from site_mirror.crawler.fetcher import Fetcher
from site_mirror.crawler.link_extractor import extract_links
from site_mirror.crawler.models import AssetKind, PageData
from site_mirror.crawler.registry import FailureLedger, VisitedRegistry
from site_mirror.crawler.scope import ScopeFilter
from site_mirror.crawler.termination import ProducerCounter
from site_mirror.errors import FetchError, StatusError, WriteError
from site_mirror.writer import MirrorWriter

__all__ = ("AsyncCrawler", "CrawlResult")


@dataclass(slots=True)
class CrawlResult:
    """Итог одного прогона: сколько страниц и ресурсов обработано."""
    pages: int
    assets: int
    failed: int
    duration: float


class AsyncCrawler:
    """Асинхронный зеркальщик: сначала страницы в границах scope, затем ресурсы.

    Registry and ledger are passed in by the caller so that a resume run can
    start from restored state; the crawler only ever mutates them through
    ``try_claim``/``mark``/``record``.
    """

    def __init__(
        self,
        config: MirrorConfig,
        scope: ScopeFilter,
        registry: Optional[VisitedRegistry] = None,
        ledger: Optional[FailureLedger] = None,
    ) -> None:
        self.config = config
        self.scope = scope
        self.registry = registry if registry is not None else VisitedRegistry()
        self.ledger = ledger if ledger is not None else FailureLedger()
        self.writer = MirrorWriter(config.output_dir)
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self.logger = logging.getLogger("SiteMirror")
        self.frontier: asyncio.Queue[str] = asyncio.Queue(maxsize=config.queue_capacity)
        # unbounded: assets are drained only after the page phase ends, a bound would stall page tasks
        self.images: asyncio.Queue[str] = asyncio.Queue()
        self.scripts: asyncio.Queue[str] = asyncio.Queue()
        self.counter: Optional[ProducerCounter] = None
        self._in_flight: Dict[str, AssetKind] = {}
        self._seeds_queued = False
        self._pages_done = 0

    async def __aenter__(self) -> AsyncCrawler:
        timeout = ClientTimeout(total=self.config.timeout)
        self.session = ClientSession(
            timeout=timeout,
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self.fetcher = Fetcher(self.session, self.config.max_concurrency)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(
        self,
        pages: Iterable[str],
        scripts: Iterable[str] = (),
        images: Iterable[str] = (),
    ) -> CrawlResult:
        """Run both phases.

        The URLs given here must already be present in the registry: a fresh
        run claims its seed, a resume run restores them from ``visited.log``.
        """
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        start = time.monotonic()
        seeds = list(pages)
        for url in scripts:
            self.scripts.put_nowait(url)
        for url in images:
            self.images.put_nowait(url)

        self.logger.info("Старт обхода: %d page(s) in scope %s", len(seeds), self.scope.scope_base)
        self.counter = ProducerCounter(len(seeds))
        downloader = ResourceDownloader(self.fetcher, self.writer, self.ledger, self._in_flight)
        try:
            await self._dispatch(seeds)
            assets = await downloader.drain(self.scripts, AssetKind.JS_CSS)
            assets += await downloader.drain(self.images, AssetKind.IMGS)
        except BaseException:
            # cancelled or a page task crashed: keep unfinished work for resume
            self._record_unfinished(seeds)
            raise

        duration = time.monotonic() - start
        self.logger.info("done: %d pages, %d assets in %.2f s", self._pages_done, assets, duration)
        return CrawlResult(self._pages_done, assets, len(self.ledger), duration)

    async def _dispatch(self, seeds: list[str]) -> None:
        """Consume the frontier until the producer counter closes it."""
        assert self.counter is not None
        closed = asyncio.ensure_future(self.counter.wait_closed())
        getter: Optional[asyncio.Future] = None
        try:
            async with asyncio.TaskGroup() as tg:
                tg.create_task(self._put_seeds(seeds))
                while True:
                    getter = asyncio.ensure_future(self.frontier.get())
                    await asyncio.wait({getter, closed}, return_when=asyncio.FIRST_COMPLETED)
                    if not getter.done():
                        getter.cancel()
                        break
                    url = getter.result()
                    self._in_flight[url] = AssetKind.PAGES
                    if self.config.delay:
                        await asyncio.sleep(self.config.delay)
                    tg.create_task(self._crawl_page(url))
        finally:
            closed.cancel()
            if getter is not None:
                if getter.done() and not getter.cancelled() and getter.exception() is None:
                    # dequeued just before the abort
                    self._in_flight.setdefault(getter.result(), AssetKind.PAGES)
                getter.cancel()

    async def _put_seeds(self, seeds: list[str]) -> None:
        for url in seeds:
            await self.frontier.put(url)
        self._seeds_queued = True

    def _record_unfinished(self, seeds: list[str]) -> None:
        """Interrupted run: everything queued or in flight must be retried on resume."""
        unfinished = dict(self._in_flight)
        for queue, kind in (
            (self.frontier, AssetKind.PAGES),
            (self.scripts, AssetKind.JS_CSS),
            (self.images, AssetKind.IMGS),
        ):
            while not queue.empty():
                unfinished[queue.get_nowait()] = kind
        if not self._seeds_queued:
            unfinished.update((url, AssetKind.PAGES) for url in seeds)
        for url, kind in unfinished.items():
            self.ledger.record(kind, url)
        self.logger.warning("interrupted: %d unfinished URL(s) kept for resume", len(unfinished))

    async def _crawl_page(self, url: str) -> None:
        assert self.counter is not None
        try:
            await self._process_page(url)
            del self._in_flight[url]
        finally:
            self.counter.release()

    async def _process_page(self, url: str) -> int:
        assert self.fetcher is not None and self.counter is not None
        try:
            page = await self.fetcher.get(url)
        except FetchError as exc:
            self.ledger.record(AssetKind.PAGES, url)
            status = exc.status if isinstance(exc, StatusError) else exc
            self.logger.warning("%s %d %s", status, self.counter.count - 1, url)
            return 0

        self._pages_done += 1
        try:
            await self.writer.write(url, page.content, page.is_html)
        except WriteError as exc:
            self.ledger.record(AssetKind.PAGES, url)
            self.logger.error("write failed %s: %s", url, exc)

        sent = await self._enqueue_links(page) if page.is_html else 0
        self.logger.info("%d %s", self.counter.count - 1, url)
        return sent

    async def _enqueue_links(self, page: PageData) -> int:
        assert self.counter is not None
        links = extract_links(page)

        for src in links.images:
            if self.registry.try_claim(src):
                await self.images.put(src)
        for src in links.scripts + links.stylesheets:
            if self.registry.try_claim(src):
                await self.scripts.put(src)

        sent = 0
        for link in links.anchors:
            if not self.scope.in_scope(link):
                continue
            if self.scope.is_ignored(link):
                self.registry.mark(link)
                continue
            if self.registry.try_claim(link):
                self.counter.acquire()
                # claimed but possibly blocked on a full frontier
                self._in_flight[link] = AssetKind.PAGES
                await self.frontier.put(link)
                sent += 1
        return sent
