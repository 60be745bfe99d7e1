"""Render engine settings.

Defaults match the values the engine was tuned with: 32x32 tiles, at most
30 worker threads, a progress report every 40 pixels. Settings can also be
read from a small JSON file; a missing file just means defaults.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from lensing.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderConfig:
    tile_size: int = 32
    max_workers: int = 30
    progress_interval: int = 40
    channel_capacity: int = 4096

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{f.name} must be a positive integer, got {value!r}")

    @classmethod
    def from_dict(cls, data: dict) -> "RenderConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown render settings: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path) -> "RenderConfig":
        path = Path(path)
        if not path.is_file():
            logger.info("No render config at %s, using defaults.", path)
            return cls()
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"malformed render config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"render config {path} must hold a JSON object")
        config = cls.from_dict(data)
        logger.info("Loaded render config from %s.", path)
        return config

    def to_dict(self) -> dict:
        return asdict(self)
