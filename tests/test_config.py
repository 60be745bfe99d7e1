import json
import logging

import pytest

from lensing.config import RenderConfig
from lensing.errors import ConfigError


def test_defaults():
    config = RenderConfig()
    assert config.to_dict() == {
        "tile_size": 32,
        "max_workers": 30,
        "progress_interval": 40,
        "channel_capacity": 4096,
    }


@pytest.mark.parametrize("field", ["tile_size", "max_workers", "progress_interval"])
def test_rejects_non_positive(field):
    with pytest.raises(ConfigError):
        RenderConfig(**{field: 0})


def test_rejects_non_integer():
    with pytest.raises(ValueError):
        RenderConfig(tile_size=8.5)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigError, match="threads"):
        RenderConfig.from_dict({"threads": 4})


def test_from_json(tmp_path):
    path = tmp_path / "render.json"
    path.write_text(json.dumps({"tile_size": 16, "max_workers": 2}), encoding="utf-8")
    config = RenderConfig.from_json(path)
    assert config.tile_size == 16
    assert config.max_workers == 2
    assert config.progress_interval == 40


def test_missing_file_gives_defaults(tmp_path, caplog):
    with caplog.at_level(logging.INFO, logger="lensing.config"):
        config = RenderConfig.from_json(tmp_path / "absent.json")
    assert config == RenderConfig()
    assert "using defaults" in caplog.text


def test_malformed_json(tmp_path):
    path = tmp_path / "render.json"
    path.write_text("{tile_size: ", encoding="utf-8")
    with pytest.raises(ConfigError):
        RenderConfig.from_json(path)


def test_json_must_be_an_object(tmp_path):
    path = tmp_path / "render.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError):
        RenderConfig.from_json(path)
