"""Matching profile management backed by YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigError
from ..schemas.matching import MatchingConfig


class ConfigManager:
    """Load named matching profiles from a directory of YAML files."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML configuration by name without file extension."""
        path = self._base_path / f"{name}.yaml"
        if not path.exists():
            raise ConfigError(f"Unknown matching profile: {name!r}")
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Matching profile {name!r} must be a YAML mapping")
        return loaded

    def load_matching(self, name: str, *, strict: bool = False) -> MatchingConfig:
        record = self.load(name)
        record.setdefault("profile", name)
        return MatchingConfig.from_record(record, strict=strict)

    def profiles(self) -> list[str]:
        if not self._base_path.is_dir():
            return []
        return sorted(path.stem for path in self._base_path.glob("*.yaml"))


__all__ = ["ConfigManager"]
