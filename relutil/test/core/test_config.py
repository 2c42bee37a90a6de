"""Tests for relutil.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relutil.core.config import (
    CONFIG_FILE_NAME,
    DEFAULT_ALLOW_BRANCH,
    DEFAULT_RELEASE_LABEL,
    ChangelogConfig,
    PublishConfig,
    ReleaseConfig,
    load_config,
    load_config_or_default,
)
from relutil.core.result import Err, Ok


class TestDefaults:
    def test_publish_defaults(self) -> None:
        config = PublishConfig()
        assert config.release_label == "hra-release"
        assert config.allow_branch == "(main|release)*"
        assert config.remote == "origin"
        assert config.registry is None

    def test_changelog_has_no_default_config(self) -> None:
        assert ChangelogConfig().config is None

    def test_frozen(self) -> None:
        config = PublishConfig()
        with pytest.raises(AttributeError):
            config.remote = "upstream"  # type: ignore[misc]


class TestFromDict:
    def test_empty(self) -> None:
        assert ReleaseConfig.from_dict({}) == ReleaseConfig()

    def test_full(self) -> None:
        config = ReleaseConfig.from_dict(
            {
                "changelog": {"config": "cliff.toml"},
                "publish": {
                    "release_label": "ship-it",
                    "allow_branch": "main",
                    "remote": "upstream",
                    "registry": "internal",
                },
            }
        )
        assert config.changelog.config == "cliff.toml"
        assert config.publish == PublishConfig(
            release_label="ship-it",
            allow_branch="main",
            remote="upstream",
            registry="internal",
        )

    def test_blank_values_fall_back_to_defaults(self) -> None:
        config = ReleaseConfig.from_dict({"publish": {"release_label": "  ", "allow_branch": ""}})
        assert config.publish.release_label == DEFAULT_RELEASE_LABEL
        assert config.publish.allow_branch == DEFAULT_ALLOW_BRANCH

    def test_wrong_types_are_ignored(self) -> None:
        config = ReleaseConfig.from_dict({"changelog": "cliff.toml", "publish": {"remote": 3}})
        assert config.changelog.config is None
        assert config.publish.remote == "origin"


class TestLoadConfig:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text(
            '[changelog]\nconfig = "https://example.com/cliff.toml"\n',
            encoding="utf-8",
        )
        result = load_config(path)
        assert isinstance(result, Ok)
        assert result.value.changelog.config == "https://example.com/cliff.toml"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / CONFIG_FILE_NAME)
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("[changelog\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path


class TestLoadConfigOrDefault:
    def test_absent_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path) == Ok(ReleaseConfig())

    def test_present_file_is_loaded(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text(
            '[publish]\nrelease_label = "release"\n', encoding="utf-8"
        )
        result = load_config_or_default(tmp_path)
        assert isinstance(result, Ok)
        assert result.value.publish.release_label == "release"

    def test_broken_file_is_an_error(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text("not = [valid", encoding="utf-8")
        assert isinstance(load_config_or_default(tmp_path), Err)
