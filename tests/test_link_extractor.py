# File: tests/test_link_extractor.py
import pytest

from site_mirror.crawler.link_extractor import extract_links, normalize_anchor, resolve_link
from site_mirror.crawler.models import PageData

PAGE_URL = "http://example.com/docs/guide/intro.html"


def make_page(markup: str) -> PageData:
    return PageData(url=PAGE_URL, content=markup.encode(), content_type="text/html")


def test_classifies_by_tag():
    page = make_page(
        """
        <html><head>
          <link rel="stylesheet" href="../css/main.css">
          <link rel="icon" href="/favicon.ico">
          <script src="/js/app.js"></script>
          <script>inline()</script>
        </head><body>
          <img src="img/logo.png">
          <a href="next.html">Next</a>
        </body></html>
        """
    )
    links = extract_links(page)

    assert links.stylesheets == ["http://example.com/docs/css/main.css"]
    assert links.scripts == ["http://example.com/js/app.js"]
    assert links.images == ["http://example.com/docs/guide/img/logo.png"]
    assert links.anchors == ["http://example.com/docs/guide/next.html"]
    assert len(links) == 4


def test_multi_valued_rel_is_a_stylesheet():
    links = extract_links(make_page('<link rel="alternate stylesheet" href="/alt.css">'))
    assert links.stylesheets == ["http://example.com/alt.css"]


def test_anchor_query_and_fragment_removed():
    links = extract_links(make_page('<a href="page?x=1#top">p</a><a href="#section">s</a>'))
    assert links.anchors == [
        "http://example.com/docs/guide/page",
        "http://example.com/docs/guide/intro.html",
    ]


def test_asset_query_is_kept():
    links = extract_links(make_page('<img src="/img/a.png?v=2">'))
    assert links.images == ["http://example.com/img/a.png?v=2"]


@pytest.mark.parametrize(
    "markup",
    [
        '<a href="mailto:someone@example.com">m</a>',
        '<a href="javascript:void(0)">j</a>',
        '<a href="tel:+123">t</a>',
        '<img src="data:image/png;base64,AAAA">',
        '<a href="">empty</a>',
        '<a href="ftp://example.com/file">ftp</a>',
        '<a href="http://[::1">broken</a>',
        "<img>",
    ],
)
def test_unusable_references_are_skipped(markup):
    assert len(extract_links(make_page(markup))) == 0


def test_raw_markup_with_base_url():
    links = extract_links('<a href="/x">x</a>', base_url="https://example.org/a/")
    assert links.anchors == ["https://example.org/x"]


def test_resolve_link_rejects_non_strings():
    assert resolve_link(PAGE_URL, None) is None
    assert resolve_link(PAGE_URL, ["a", "b"]) is None


def test_normalize_anchor_root():
    assert normalize_anchor("http://example.com?x=1") == "http://example.com/"
    assert normalize_anchor("http://example.com/a/b?q#f") == "http://example.com/a/b"
