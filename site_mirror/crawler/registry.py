# site_mirror/crawler/registry.py
"""
Shared per-run sets: the visited/dedup registry and the failure ledger.
"""
from __future__ import annotations

import threading
from typing import Dict, Iterable, Iterator, List, Set

from site_mirror.crawler.models import AssetKind


class VisitedRegistry:
    """Every URL ever enqueued or deliberately skipped during a run."""

    def __init__(self, urls: Iterable[str] = ()) -> None:
        self._urls: Set[str] = set(urls)
        self._lock = threading.Lock()

    def try_claim(self, url: str) -> bool:
        """Insert *url*; True only for the caller that inserted it first."""
        with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def mark(self, url: str) -> None:
        with self._lock:
            self._urls.add(url)

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._urls))


class FailureLedger:
    """Failed URLs partitioned by the queue they came from."""

    def __init__(self) -> None:
        self._failed: Dict[AssetKind, Set[str]] = {kind: set() for kind in AssetKind}
        self._lock = threading.Lock()

    def record(self, kind: AssetKind, url: str) -> None:
        with self._lock:
            self._failed[kind].add(url)

    def urls(self, kind: AssetKind) -> List[str]:
        with self._lock:
            return sorted(self._failed[kind])

    def __contains__(self, url: object) -> bool:
        return any(url in urls for urls in self._failed.values())

    def __len__(self) -> int:
        return sum(len(urls) for urls in self._failed.values())
