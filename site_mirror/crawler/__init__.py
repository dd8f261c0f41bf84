# File: site_mirror/crawler/__init__.py
"""site_mirror.crawler: обход страниц в границах scope и загрузка ресурсов."""

from .crawler import AsyncCrawler, CrawlResult

__all__ = ["AsyncCrawler", "CrawlResult"]
