# site_mirror/crawler/scope.py
"""
Crawl boundary: scope base computation and the in-scope / ignored checks.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple
from urllib.parse import urlparse

from site_mirror.errors import ArgumentError

__all__ = ("ScopeFilter", "compute_scope_base", "resolve_ignored")


def compute_scope_base(seed_url: str, base_index: int) -> str:
    """
    Truncate the path of *seed_url* to its first *base_index* segments.

    ``http://x/docs/a.html`` with ``base_index=1`` gives ``http://x/docs``;
    ``base_index=0`` gives ``http://x/``.
    """
    parsed = urlparse(seed_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ArgumentError(f"seed URL must be absolute http(s): {seed_url!r}")
    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) < base_index:
        raise ArgumentError(
            f"url path {parsed.path or '/'!r} is shorter than base {base_index}"
        )
    base_path = "/" + "/".join(segments[:base_index])
    return f"{parsed.scheme}://{parsed.netloc}{base_path}"


def resolve_ignored(scope_base: str, prefixes: Iterable[str]) -> List[str]:
    """Turn CLI ignore prefixes (relative to the scope base) into absolute ones."""
    resolved: List[str] = []
    for prefix in prefixes:
        if prefix.startswith(("http://", "https://")):
            resolved.append(prefix)
            continue
        tail = prefix.lstrip("/")
        joiner = "" if scope_base.endswith("/") else "/"
        resolved.append(f"{scope_base}{joiner}{tail}")
    return resolved


@dataclass(frozen=True, slots=True)
class ScopeFilter:
    """Prefix-based page filter; assets never go through it."""

    scope_base: str
    ignored: Tuple[str, ...] = field(default_factory=tuple)

    def in_scope(self, url: str) -> bool:
        return url.startswith(self.scope_base)

    def is_ignored(self, url: str) -> bool:
        return any(url.startswith(p) for p in self.ignored)
