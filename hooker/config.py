"""Configuration models and loading for Hooker."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PRIORITY = 5
DEFAULT_MAX_PRIORITY = 20


class HookerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_priority: int = Field(default=DEFAULT_MAX_PRIORITY, ge=0)
    global_timeout_ms: float | None = None
    allow_unregistered_events: bool = True

    @property
    def global_deadline_enabled(self) -> bool:
        return self.global_timeout_ms is not None and self.global_timeout_ms > 0


class HookOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str = ""
    priority: int = DEFAULT_PRIORITY
    timeout_ms: float = 0
    track: bool = False


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML at {path} must decode to a mapping")
    # Allow the settings to live under a `hooker:` section of a larger file.
    section = data.get("hooker")
    if isinstance(section, dict):
        return section
    return data


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> HookerConfig:
    """Load config with precedence overrides > YAML file > model defaults."""
    merged: dict[str, Any] = {}
    if path is not None:
        merged = _deep_merge(merged, _load_yaml(Path(path)))
    if overrides:
        merged = _deep_merge(merged, overrides)
    return HookerConfig.model_validate(merged)
