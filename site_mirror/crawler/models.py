# site_mirror/crawler/models.py
"""
Data models for the SiteMirror crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class AssetKind(str, Enum):
    """Failure ledger partitions; the value is the tag used in ``failed.log``."""

    PAGES = "pages"
    JS_CSS = "js_css"
    IMGS = "imgs"


@dataclass(slots=True)
class PageData:
    """Holds the URL, raw body and content type of a fetched resource."""

    url: str
    content: bytes
    content_type: str = ""
    status: int = 200

    @property
    def is_html(self) -> bool:
        return "html" in self.content_type.lower()


@dataclass(slots=True)
class ClassifiedLinks:
    """Absolute links found on one page, grouped by the tag they came from."""

    images: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)
    stylesheets: List[str] = field(default_factory=list)
    anchors: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.images) + len(self.scripts) + len(self.stylesheets) + len(self.anchors)
