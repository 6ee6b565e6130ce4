"""Configuration file loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..schemas.config import AppConfig, load_config


class ConfigManager:
    """YAML-backed configuration loader rooted at a settings directory."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML document by name without file extension."""
        return _read_yaml(self._base_path / f"{name}.yaml")

    def load_app_config(self, name: str = "staffmatch") -> AppConfig:
        return load_config(self.load(name))


def load_settings(path: str | Path) -> dict[str, Any]:
    """Read and validate a settings file, returning container overrides."""
    return load_config(_read_yaml(Path(path))).to_settings()


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must be a YAML mapping: {path}")
    return loaded


__all__ = ["ConfigManager", "load_settings"]
