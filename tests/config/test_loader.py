"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence and validation
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from jaivalens.config.loader import _deep_merge, _load_yaml, load_config
from jaivalens.core.errors import ConfigError, ErrorCode


def _write_repo_config(root: Path, text: str) -> None:
    config_dir = root / ".jaivalens"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.yaml").write_text(text)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads valid YAML content."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("index:\n  max_string_length: 8\n")

        assert _load_yaml(yaml_file) == {"index": {"max_string_length": 8}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid YAML syntax."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("logging:\n  level:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        """A top-level list is not a config."""
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_empty_dicts(self) -> None:
        assert _deep_merge({}, {}) == {}

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1}, {"a": 2}) == {"a": 2}

    def test_nested_merge_keeps_siblings(self) -> None:
        base = {"index": {"max_string_length": 10, "error_binding": "err"}}
        override = {"index": {"max_string_length": 30}}

        assert _deep_merge(base, override) == {
            "index": {"max_string_length": 30, "error_binding": "err"}
        }

    def test_base_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_defaults_without_files(self, tmp_path: Path) -> None:
        with patch("jaivalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.index.max_string_length == 20
        assert config.completion.include_keywords is True

    def test_repo_yaml_applied(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "index:\n  max_string_length: 8\n")

        with patch("jaivalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.index.max_string_length == 8

    def test_repo_yaml_overrides_global_yaml(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text(
            "index:\n  max_string_length: 5\n  error_binding: oops\n"
        )
        repo = tmp_path / "repo"
        _write_repo_config(repo, "index:\n  max_string_length: 9\n")

        with patch("jaivalens.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(repo)

        assert config.index.max_string_length == 9
        assert config.index.error_binding == "oops"

    def test_env_overrides_yaml(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "logging:\n  level: DEBUG\n")

        with (
            patch("jaivalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"JAIVALENS__LOGGING__LEVEL": "WARNING"}),
        ):
            config = load_config(tmp_path)

        assert config.logging.level == "WARNING"

    def test_kwargs_override_everything(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "completion:\n  include_keywords: true\n")

        with patch("jaivalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path, completion={"include_keywords": False})

        assert config.completion.include_keywords is False

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "index:\n  max_string_length: 0\n")

        with (
            patch("jaivalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "max_string_length" in exc_info.value.details["field"]

    def test_invalid_yaml_raises_parse_error(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "index: [unclosed")

        with (
            patch("jaivalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path)

        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR
