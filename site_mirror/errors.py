# File: site_mirror/errors.py
"""site_mirror.errors: иерархия исключений зеркалирования.

Fetch/Write ошибки ловятся на границе задачи и попадают в журнал отказов;
ArgumentError и StateError фатальны и возникают до начала работы.
"""

from __future__ import annotations

__all__ = [
    "MirrorError",
    "FetchError",
    "TransportError",
    "StatusError",
    "WriteError",
    "ArgumentError",
    "StateError",
]


class MirrorError(Exception):
    """Базовое исключение SiteMirror."""


class FetchError(MirrorError):
    """Не удалось получить ресурс по сети."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


class TransportError(FetchError):
    """Ошибка соединения, DNS или таймаут."""


class StatusError(FetchError):
    """Сервер ответил статусом, отличным от 200."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(url, f"HTTP {status}")
        self.status = status


class WriteError(MirrorError):
    """Не удалось создать каталог или записать файл зеркала."""


class ArgumentError(MirrorError):
    """Некорректные параметры запуска."""


class StateError(MirrorError):
    """Сохранённое состояние отсутствует или повреждено."""
