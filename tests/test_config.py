"""Tests for config loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cognition.config import ENV_CONFIG_PATH, SchedulerConfig, load_config
from cognition.errors import ConfigError


class TestLoadConfig:
    """Test file lookup and parsing."""

    def test_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            "[budget]\nmax_items_per_cycle = 7\ncycle_duration_ms = -5\n\n"
            "[weights]\nimpact = 0.4\nunknown = 1.0\n"
        )

        config = load_config(path)

        assert config.source == path
        assert config.budget.max_items_per_cycle == 7
        assert config.budget.cycle_duration_ms == 60_000
        assert config.weights.impact == 0.4

    def test_json_with_camel_case(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"budget": {"maxTurnsPerItem": 4}}))

        config = load_config(path)

        assert config.budget.max_turns_per_item == 4

    def test_env_var(self, tmp_path: Path) -> None:
        path = tmp_path / "env.toml"
        path.write_text("[budget]\nmax_parallel_sessions = 2\n")

        config = load_config(environ={ENV_CONFIG_PATH: str(path)})

        assert config.budget.max_parallel_sessions == 2

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.toml")

    def test_missing_env_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(environ={ENV_CONFIG_PATH: str(tmp_path / "nope.toml")})

    def test_missing_default_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))

        config = load_config(environ={})

        assert config.source is None
        assert config.budget.max_items_per_cycle == 3

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[budget\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_section_must_be_table(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"budget": 5}))
        with pytest.raises(ConfigError):
            load_config(path)

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError):
            load_config(path)


class TestSchedulerConfig:
    """Test mapping construction."""

    def test_defaults(self) -> None:
        config = SchedulerConfig.from_mapping({})
        assert config.budget.max_items_per_cycle == 3
        assert config.weights.effort == -0.05
