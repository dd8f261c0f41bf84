# File: tests/conftest.py
import asyncio
from collections import Counter
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Dict, Set, Tuple

import pytest
import pytest_asyncio
from aiohttp import web

from site_mirror.config import MirrorConfig

#: path -> (body, content type) served by the fake site
Pages = Dict[str, Tuple[bytes, str]]


def html(*, anchors=(), images=(), scripts=(), styles=()) -> Tuple[bytes, str]:
    """Build a small HTML document referencing the given links."""
    parts = ["<html><head>"]
    parts += [f'<link rel="stylesheet" href="{s}">' for s in styles]
    parts += [f'<script src="{s}"></script>' for s in scripts]
    parts.append("</head><body>")
    parts += [f'<a href="{a}">{a}</a>' for a in anchors]
    parts += [f'<img src="{i}">' for i in images]
    parts.append("</body></html>")
    return "".join(parts).encode(), "text/html; charset=utf-8"


@dataclass
class FakeSite:
    """Deterministic in-process web server standing in for a real site."""

    pages: Pages
    hits: Counter = field(default_factory=Counter)
    failing: Set[str] = field(default_factory=set)
    slow: Dict[str, float] = field(default_factory=dict)
    base_url: str = ""

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def app(self) -> web.Application:
        async def handle(request: web.Request) -> web.Response:
            path = request.path
            self.hits[path] += 1
            if path in self.slow:
                await asyncio.sleep(self.slow[path])
            if path in self.failing:
                return web.Response(status=500)
            if path not in self.pages:
                return web.Response(status=404)
            body, ctype = self.pages[path]
            return web.Response(body=body, headers={"Content-Type": ctype})

        app = web.Application()
        app.router.add_get("/{tail:.*}", handle)
        return app


@asynccontextmanager
async def serve_app(app: web.Application) -> AsyncIterator[str]:
    """Start *app* on a free port, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    try:
        host, port = runner.addresses[0][:2]
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


DOCS_SITE: Pages = {
    "/docs/": html(
        anchors=["/docs/a", "/other", "/docs/private/secret", "a?ref=1#top", "mailto:me@example.com"],
        images=["/img/1.png"],
        scripts=["/js/app.js"],
        styles=["/css/site.css"],
    ),
    "/docs/a": html(anchors=["/docs/", "b"], images=["/img/1.png"]),
    "/docs/b": html(anchors=["/docs/a", "c"], images=["/img/2.png"]),
    "/docs/c": html(anchors=["/docs/"]),
    "/docs/private/secret": html(),
    "/other": html(),
    "/img/1.png": (b"\x89PNG\r\n\x1a\n1", "image/png"),
    "/img/2.png": (b"\x89PNG\r\n\x1a\n2", "image/png"),
    "/js/app.js": (b"console.log('hi');", "application/javascript"),
    "/css/site.css": (b"body { color: red; }", "text/css"),
}


@pytest_asyncio.fixture
async def docs_site() -> AsyncIterator[FakeSite]:
    site = FakeSite(dict(DOCS_SITE))
    async with serve_app(site.app()) as base:
        site.base_url = base
        yield site


@pytest.fixture()
def mirror_config(tmp_path: Path):
    """Factory for configs pointing at *tmp_path*."""

    def _make(seed_url: str, **overrides) -> MirrorConfig:
        data = {
            "seed_url": seed_url,
            "output_dir": tmp_path / "out",
            "base_index": 1,
            "timeout": 5.0,
            "user_agent": "TestAgent/1.0",
        }
        data.update(overrides)
        return MirrorConfig(**data)

    return _make
