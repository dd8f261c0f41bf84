# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from site_mirror.config import MirrorConfig, load_config, override_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("seed_url: http://example.com/docs/\nbase_index: 1", ".yaml", None),
        (json.dumps({"seed_url": "http://example.com/docs/", "base_index": 1}), ".json", None),
        (json.dumps({"base_index": -1}), ".json", ValidationError),
        ("seed_url: ftp://example.com/", ".yml", ValidationError),
        ("unknown_key: 1", ".yaml", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("::invalid yaml", ".yaml", TypeError),
        ("{broken", ".json", ValueError),
        ("seed_url = 'x'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, MirrorConfig)
        assert cfg.seed_url == "http://example.com/docs/"
        assert cfg.base_index == 1


def test_load_config_defaults():
    cfg = load_config(None)
    assert cfg.seed_url is None
    assert cfg.frequency_ms == 0
    assert cfg.max_concurrency == 0
    assert cfg.state_dir == Path("mirror") / ".site_mirror"


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_override_config_revalidates(tmp_path):
    cfg = MirrorConfig(output_dir=tmp_path, frequency_ms=100)
    updated = override_config(cfg, frequency_ms=None, base_index=2, ignored=["", "tmp"])
    assert updated.frequency_ms == 100
    assert updated.base_index == 2
    assert updated.ignored == ["tmp"]
    assert updated.delay == pytest.approx(0.1)
    with pytest.raises(ValidationError):
        override_config(cfg, base_index=-3)


def test_output_dir_must_be_directory(tmp_path):
    target = tmp_path / "file"
    target.write_text("x")
    with pytest.raises(ValidationError):
        MirrorConfig(output_dir=target)
