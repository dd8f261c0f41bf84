# File: site_mirror/writer.py
"""site_mirror.writer: раскладывает скачанные ресурсы по каталогу зеркала.

URL ``/a/b`` с HTML-содержимым превращается в ``<dir>/a/b/index.html``,
``/a/b.html`` и любые не-HTML ресурсы сохраняются как есть.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Union
from urllib.parse import unquote, urlparse

import aiofiles
import aiofiles.os

from site_mirror.errors import WriteError
from site_mirror.logger import logger

__all__ = ["MirrorWriter", "target_path"]

INDEX_FILE = "index.html"


def target_path(output_dir: Union[str, Path], url: str, is_html: bool) -> Path:
    """Возвращает локальный путь для url внутри output_dir."""
    url_path = unquote(urlparse(url).path) or "/"
    parts = [p for p in PurePosixPath(url_path).parts if p != "/"]
    if ".." in parts:
        raise WriteError(f"refusing to write outside of mirror: {url}")

    target = Path(output_dir).joinpath(*parts)
    if url_path.endswith("/") or not parts:
        return target / INDEX_FILE
    if is_html and not url_path.endswith(".html"):
        return target / INDEX_FILE
    return target


class MirrorWriter:
    """Асинхронная запись файлов зеркала через aiofiles."""

    def __init__(self, output_dir: Union[str, Path]) -> None:
        self.output_dir = Path(output_dir)

    async def write(self, url: str, content: bytes, is_html: bool) -> Path:
        """Создаёт промежуточные каталоги и записывает content; ошибки ОС -> WriteError."""
        path = target_path(self.output_dir, url, is_html)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "wb") as fh:
                await fh.write(content)
        except OSError as exc:
            raise WriteError(f"{path}: {exc.strerror or exc}") from exc
        logger.debug("Saved %s -> %s", url, path)
        return path
