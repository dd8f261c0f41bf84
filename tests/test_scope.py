# File: tests/test_scope.py
import pytest

from site_mirror.crawler.scope import ScopeFilter, compute_scope_base, resolve_ignored
from site_mirror.errors import ArgumentError


@pytest.mark.parametrize(
    "seed,base_index,expected",
    [
        ("http://x/docs/", 1, "http://x/docs"),
        ("http://x/docs/", 0, "http://x/"),
        ("https://docs.rs/url/latest/url/index.html", 3, "https://docs.rs/url/latest/url"),
        ("https://docs.rs/url/latest/url/index.html", 4, "https://docs.rs/url/latest/url/index.html"),
        ("http://localhost:8080", 0, "http://localhost:8080/"),
        ("http://x//a//b/", 2, "http://x/a/b"),
    ],
)
def test_compute_scope_base(seed, base_index, expected):
    assert compute_scope_base(seed, base_index) == expected


def test_scope_base_deeper_than_path():
    with pytest.raises(ArgumentError):
        compute_scope_base("http://x/docs/", 2)


def test_scope_base_requires_absolute_url():
    with pytest.raises(ArgumentError):
        compute_scope_base("/docs/", 0)


def test_resolve_ignored():
    assert resolve_ignored("http://x/docs", ["private", "/old", "https://y/abs"]) == [
        "http://x/docs/private",
        "http://x/docs/old",
        "https://y/abs",
    ]
    assert resolve_ignored("http://x/", ["tmp"]) == ["http://x/tmp"]


def test_filter():
    scope = ScopeFilter("http://x/docs", ("http://x/docs/private",))

    assert scope.in_scope("http://x/docs/a")
    assert not scope.in_scope("http://x/other")
    assert not scope.in_scope("https://x/docs/a")
    assert scope.is_ignored("http://x/docs/private/key")
    assert not scope.is_ignored("http://x/docs/public")
