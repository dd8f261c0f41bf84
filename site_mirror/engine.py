# File: site_mirror/engine.py
"""site_mirror.engine: Orchestration layer — подготовка состояния, запуск обхода и сохранение логов."""

from __future__ import annotations

from dataclasses import dataclass

from site_mirror.config import MirrorConfig
from site_mirror.crawler.crawler import AsyncCrawler, CrawlResult
from site_mirror.crawler.models import AssetKind
from site_mirror.crawler.registry import FailureLedger, VisitedRegistry
from site_mirror.crawler.scope import ScopeFilter, compute_scope_base, resolve_ignored
from site_mirror.errors import ArgumentError, StateError
from site_mirror.logger import logger
from site_mirror.state import CrawlSnapshot, CrawlState

__all__ = ["MirrorRun", "start_mirror", "resume_mirror", "prepare_fresh", "prepare_resume"]


@dataclass
class MirrorRun:
    """Всё, что нужно одному запуску: граница обхода, реестры и стартовые очереди."""

    config: MirrorConfig
    scope: ScopeFilter
    registry: VisitedRegistry
    ledger: FailureLedger
    pages: list[str]
    scripts: list[str]
    images: list[str]


def prepare_fresh(config: MirrorConfig) -> MirrorRun:
    """Вычисляет scope base по seed_url и захватывает seed в реестре."""
    if not config.seed_url:
        raise ArgumentError("a fresh run needs a seed URL")
    scope_base = compute_scope_base(config.seed_url, config.base_index)
    ignored = resolve_ignored(scope_base, config.ignored)
    registry = VisitedRegistry()
    registry.try_claim(config.seed_url)
    return MirrorRun(
        config=config,
        scope=ScopeFilter(scope_base, tuple(ignored)),
        registry=registry,
        ledger=FailureLedger(),
        pages=[config.seed_url],
        scripts=[],
        images=[],
    )


def prepare_resume(config: MirrorConfig) -> MirrorRun:
    """Восстанавливает реестр и повторяет только прошлые отказы."""
    snapshot: CrawlSnapshot = CrawlState(config.state_dir).load()
    if config.seed_url:
        expected = compute_scope_base(config.seed_url, config.base_index)
        if expected != snapshot.scope_base:
            raise StateError(
                f"resume scope {snapshot.scope_base!r} does not match configured scope {expected!r}"
            )
    logger.info(
        "Resuming %s: %d visited, %d failed",
        snapshot.scope_base,
        len(snapshot.visited),
        snapshot.failed_count,
    )
    return MirrorRun(
        config=config,
        scope=ScopeFilter(snapshot.scope_base, tuple(snapshot.ignored)),
        registry=VisitedRegistry(snapshot.visited),
        ledger=FailureLedger(),
        pages=snapshot.failed[AssetKind.PAGES],
        scripts=snapshot.failed[AssetKind.JS_CSS],
        images=snapshot.failed[AssetKind.IMGS],
    )


async def run_mirror(run: MirrorRun) -> CrawlResult:
    """Запускает обход; состояние сохраняется даже при прерывании."""
    state = CrawlState(run.config.state_dir)
    try:
        async with AsyncCrawler(run.config, run.scope, run.registry, run.ledger) as crawler:
            return await crawler.crawl(run.pages, run.scripts, run.images)
    finally:
        state.save(run.scope.scope_base, run.scope.ignored, run.registry, run.ledger)
        logger.info("State written to %s", state.state_dir)


async def start_mirror(config: MirrorConfig) -> CrawlResult:
    return await run_mirror(prepare_fresh(config))


async def resume_mirror(config: MirrorConfig) -> CrawlResult:
    return await run_mirror(prepare_resume(config))
