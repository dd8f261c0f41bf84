# === FILE: site_mirror/state.py ===
"""Crawl state persistence for resumable runs.

Two text logs live under ``<output_dir>/.site_mirror/``:

``visited.log``
    Every URL claimed during the run, one per line.

``failed.log``
    A versioned header followed by one tagged block per failure category::

        #site-mirror-state 1
        scope_base http://example.com/docs
        ignore http://example.com/docs/private
        ### pages
        http://example.com/docs/broken
        ### js_css
        ### imgs
        http://example.com/img/missing.png

A resume run reads both logs back into a :class:`CrawlSnapshot`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Final, Iterable, List, Union

from site_mirror.crawler.models import AssetKind
from site_mirror.crawler.registry import FailureLedger, VisitedRegistry
from site_mirror.errors import StateError
from site_mirror.logger import logger

FORMAT_MAGIC: Final[str] = "#site-mirror-state"
FORMAT_VERSION: Final[int] = 1
BLOCK_MARKER: Final[str] = "###"

VISITED_LOG: Final[str] = "visited.log"
FAILED_LOG: Final[str] = "failed.log"

__all__ = ["CrawlSnapshot", "CrawlState", "dump_failed", "parse_failed"]


@dataclass
class CrawlSnapshot:
    """Everything a resume run needs from the previous one."""

    scope_base: str
    ignored: List[str] = field(default_factory=list)
    visited: List[str] = field(default_factory=list)
    failed: Dict[AssetKind, List[str]] = field(
        default_factory=lambda: {kind: [] for kind in AssetKind}
    )

    @property
    def failed_count(self) -> int:
        return sum(len(urls) for urls in self.failed.values())


def dump_failed(scope_base: str, ignored: Iterable[str], ledger: FailureLedger) -> str:
    lines = [f"{FORMAT_MAGIC} {FORMAT_VERSION}", f"scope_base {scope_base}"]
    lines.extend(f"ignore {prefix}" for prefix in ignored)
    for kind in AssetKind:
        lines.append(f"{BLOCK_MARKER} {kind.value}")
        lines.extend(ledger.urls(kind))
    return "\n".join(lines) + "\n"


def parse_failed(text: str) -> CrawlSnapshot:
    """Parse ``failed.log`` contents; any deviation from the format is a StateError."""
    lines = [ln.strip() for ln in text.splitlines()]
    lines = [ln for ln in lines if ln]
    if not lines:
        raise StateError("failed log is empty")

    magic, _, version = lines[0].partition(" ")
    if magic != FORMAT_MAGIC:
        raise StateError("failed log has no state header")
    if version != str(FORMAT_VERSION):
        raise StateError(f"unsupported state format version {version!r}")

    scope_base = None
    ignored: List[str] = []
    failed: Dict[AssetKind, List[str]] = {kind: [] for kind in AssetKind}
    current = None

    for number, line in enumerate(lines[1:], start=2):
        if line.startswith(BLOCK_MARKER):
            tag = line[len(BLOCK_MARKER):].strip()
            try:
                current = AssetKind(tag)
            except ValueError:
                raise StateError(f"line {number}: unknown block tag {tag!r}") from None
            continue
        if current is not None:
            failed[current].append(line)
            continue
        key, _, value = line.partition(" ")
        if key == "scope_base" and value:
            scope_base = value
        elif key == "ignore" and value:
            ignored.append(value)
        else:
            raise StateError(f"line {number}: unexpected header entry {line!r}")

    if scope_base is None:
        raise StateError("failed log does not define scope_base")
    return CrawlSnapshot(scope_base=scope_base, ignored=ignored, failed=failed)


class CrawlState:
    """Reads and writes the two state logs of one mirror directory."""

    def __init__(self, state_dir: Union[str, Path]) -> None:
        self.state_dir = Path(state_dir)
        self.visited_path = self.state_dir / VISITED_LOG
        self.failed_path = self.state_dir / FAILED_LOG

    def exists(self) -> bool:
        return self.visited_path.is_file() and self.failed_path.is_file()

    def save(
        self,
        scope_base: str,
        ignored: Iterable[str],
        registry: VisitedRegistry,
        ledger: FailureLedger,
    ) -> None:
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            visited = list(registry)
            self.visited_path.write_text(
                "\n".join(visited) + ("\n" if visited else ""),
                encoding="utf-8",
                newline="\n",
            )
            self.failed_path.write_text(
                dump_failed(scope_base, ignored, ledger), encoding="utf-8", newline="\n"
            )
        except OSError as exc:
            raise StateError(f"cannot write crawl state to {self.state_dir}: {exc}") from exc
        logger.debug("State saved: %d visited, %d failed", len(registry), len(ledger))

    def load(self) -> CrawlSnapshot:
        try:
            visited_text = self.visited_path.read_text(encoding="utf-8")
            failed_text = self.failed_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StateError(f"cannot read crawl state from {self.state_dir}: {exc}") from exc

        snapshot = parse_failed(failed_text)
        snapshot.visited = [ln.strip() for ln in visited_text.splitlines() if ln.strip()]
        return snapshot
