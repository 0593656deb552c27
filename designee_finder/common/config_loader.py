"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from designee_finder.common.errors import ConfigError
from designee_finder.common.fs import read_yaml, user_cache_dir
from designee_finder.common.schema import validate_settings_config

DEFAULT_CONFIG_PATH = Path("config") / "settings.yml"


@dataclass(frozen=True)
class Settings:
    registry: dict
    cache: dict
    coordinates: dict

    def cache_dir(self) -> Path:
        if self.cache["dir"]:
            return Path(self.cache["dir"]).expanduser()
        return user_cache_dir()

    def coordinates_path(self) -> Path | None:
        raw = self.coordinates["path"]
        return Path(raw).expanduser() if raw else None


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing settings file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def load_settings(
    config_path: Path = DEFAULT_CONFIG_PATH,
    *,
    allow_unknown: bool = False,
    overlay_path: Path | None = None,
) -> Settings:
    cfg = validate_settings_config(
        _load_yaml_with_overlay(config_path, overlay_path),
        allow_unknown=allow_unknown,
    )
    return Settings(
        registry=cfg["registry"],
        cache=cfg["cache"],
        coordinates=cfg["coordinates"],
    )
