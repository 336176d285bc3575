"""Scheduler configuration loaded from TOML or JSON.

Lookup order when no path is given:
    1. $COGNITION_CONFIG
    2. ~/.cognition/config.toml

Both files may hold a ``[budget]`` and a ``[weights]`` table. Unknown keys and
invalid values are ignored, the same way runtime overrides are.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cognition.engine.models import Budget, PriorityWeights
from cognition.errors import ConfigError

ENV_CONFIG_PATH = "COGNITION_CONFIG"
DEFAULT_CONFIG_FILE = "config.toml"


def default_config_path() -> Path:
    return Path.home() / ".cognition" / DEFAULT_CONFIG_FILE


@dataclass
class SchedulerConfig:
    """Budget and priority weights for a scheduler instance."""

    budget: Budget = field(default_factory=Budget)
    weights: PriorityWeights = field(default_factory=PriorityWeights)
    source: Path | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], source: Path | None = None) -> SchedulerConfig:
        config = cls(source=source)
        budget = payload.get("budget", {})
        weights = payload.get("weights", {})
        if not isinstance(budget, Mapping) or not isinstance(weights, Mapping):
            raise ConfigError(f"'budget' and 'weights' must be tables in {source or 'config'}")
        config.budget.update(budget)
        config.weights.update(weights)
        return config


def load_config(
    path: str | Path | None = None, *, environ: Mapping[str, str] | None = None
) -> SchedulerConfig:
    """Load config from ``path`` or the default locations.

    An explicit path (argument or environment) must exist. A missing default
    file just yields the built-in defaults.
    """
    env = os.environ if environ is None else environ
    explicit = path is not None or bool(env.get(ENV_CONFIG_PATH))
    if path is None:
        path = env.get(ENV_CONFIG_PATH) or default_config_path()
    resolved = Path(path).expanduser()

    if not resolved.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {resolved}")
        return SchedulerConfig()

    return SchedulerConfig.from_mapping(_read_payload(resolved), source=resolved)


def _read_payload(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a table/object")
    return payload
