# === FILE: site_mirror/config.py ===
"""
Модуль для загрузки и валидации конфигурации зеркалирования SiteMirror.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

STATE_DIR_NAME = ".site_mirror"


class MirrorConfig(BaseModel):
    """Конфигурация для одного запуска зеркалирования."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: Optional[str] = Field(None, description="Стартовая страница (не нужна при возобновлении).")
    output_dir: Path = Field(Path("mirror"), description="Каталог для зеркала.")
    base_index: int = Field(0, ge=0, description="Глубина пути, задающая границу обхода.")
    frequency_ms: int = Field(0, ge=0, description="Пауза перед запуском каждой задачи (мс).")
    ignored: list[str] = Field(default_factory=list, description="Игнорируемые префиксы.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("SiteMirrorBot/1.0", min_length=1, description="Заголовок User-Agent.")
    queue_capacity: int = Field(1000, ge=1, description="Ёмкость каждой очереди.")
    max_concurrency: int = Field(0, ge=0, description="Лимит одновременных загрузок, 0 = без лимита.")

    @field_validator("seed_url", mode="before")
    def _check_scheme(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.startswith(("http://", "https://")):
            raise ValueError(f"seed_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("ignored", mode="before")
    def _drop_empty(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [p for p in v if p]
        return v

    @model_validator(mode="after")
    def _check_output_dir(self) -> MirrorConfig:
        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise ValueError(f"output_dir {self.output_dir} is not a directory")
        return self

    @property
    def state_dir(self) -> Path:
        return self.output_dir / STATE_DIR_NAME

    @property
    def delay(self) -> float:
        return self.frequency_ms / 1000


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> MirrorConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект MirrorConfig.
    Без пути возвращает конфигурацию по умолчанию.
    """
    if path is None:
        return MirrorConfig()

    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return MirrorConfig(**data)
    except ValidationError:
        raise


def override_config(cfg: MirrorConfig, **changes: Any) -> MirrorConfig:
    """Возвращает копию cfg с непустыми значениями из changes (аргументы CLI)."""
    update = {k: v for k, v in changes.items() if v is not None}
    if not update:
        return cfg
    return MirrorConfig(**{**cfg.model_dump(), **update})
