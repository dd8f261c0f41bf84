# site_mirror/crawler/link_extractor.py
"""
Link extraction and classification utilities for SiteMirror.
"""
from __future__ import annotations

from typing import Iterator, Optional, Union
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag
from site_mirror.crawler.models import ClassifiedLinks, PageData

_SKIP_SCHEMES = ("mailto:", "javascript:", "data:", "tel:")


def resolve_link(base: str, raw: object) -> Optional[str]:
    """
    Resolve attribute value *raw* against *base*.

    Returns None for anything that is not an absolute http(s) URL afterwards.
    """
    if not isinstance(raw, str):
        return None
    raw = raw.strip()
    if not raw or raw.lower().startswith(_SKIP_SCHEMES):
        return None
    try:
        absolute = urljoin(base, raw)
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return absolute


def normalize_anchor(url: str) -> str:
    """Re-join *url* against its own path, dropping query and fragment."""
    parsed = urlparse(url)
    return parsed._replace(path=parsed.path or "/", params="", query="", fragment="").geturl()


def _attrs(soup: BeautifulSoup, selector: str, attr: str) -> Iterator[object]:
    for tag in soup.select(selector):
        if isinstance(tag, Tag):
            yield tag.get(attr)


def extract_links(page: Union[PageData, str], base_url: str = "") -> ClassifiedLinks:
    """
    Extract image, script, stylesheet and anchor links from an HTML page.

    Accepts a :class:`PageData` or raw markup plus ``base_url``. Broken
    references are skipped one by one; they never fail the whole page.
    """
    if isinstance(page, PageData):
        markup: Union[str, bytes] = page.content
        base_url = page.url
    else:
        markup = page

    soup = BeautifulSoup(markup, "html.parser")
    links = ClassifiedLinks()

    groups = (
        (links.images, "img[src]", "src"),
        (links.scripts, "script[src]", "src"),
        (links.stylesheets, 'link[rel~="stylesheet"][href]', "href"),
    )
    for bucket, selector, attr in groups:
        for raw in _attrs(soup, selector, attr):
            absolute = resolve_link(base_url, raw)
            if absolute is not None:
                bucket.append(absolute)

    for raw in _attrs(soup, "a[href]", "href"):
        absolute = resolve_link(base_url, raw)
        if absolute is not None:
            links.anchors.append(normalize_anchor(absolute))

    return links
