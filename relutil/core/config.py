"""Typed configuration loading and access.

The optional `release-util.toml` file at the workspace root provides defaults
for values the CLI would otherwise require on every invocation:

    [changelog]
    config = "cliff.toml"

    [publish]
    release_label = "hra-release"
    allow_branch = "(main|release)*"
    remote = "origin"
    registry = "my-registry"

Command line values always win over the file. Secrets (the push token) are
never read from this file.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_ALLOW_BRANCH",
    "DEFAULT_RELEASE_LABEL",
    "DEFAULT_REMOTE",
    "ChangelogConfig",
    "ConfigError",
    "PublishConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "release-util.toml"

DEFAULT_RELEASE_LABEL = "hra-release"
DEFAULT_ALLOW_BRANCH = "(main|release)*"
DEFAULT_REMOTE = "origin"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    """git-cliff settings."""

    # Path or URL of the git-cliff configuration.
    config: str | None = None


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Settings for the publish pipeline."""

    release_label: str = DEFAULT_RELEASE_LABEL
    allow_branch: str = DEFAULT_ALLOW_BRANCH
    remote: str = DEFAULT_REMOTE
    registry: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML)."""
        changelog: StrDict = get_table(data, "changelog") or {}
        publish: StrDict = get_table(data, "publish") or {}

        return cls(
            changelog=ChangelogConfig(config=get_str(changelog, "config")),
            publish=PublishConfig(
                release_label=get_str(publish, "release_label") or DEFAULT_RELEASE_LABEL,
                allow_branch=get_str(publish, "allow_branch") or DEFAULT_ALLOW_BRANCH,
                remote=get_str(publish, "remote") or DEFAULT_REMOTE,
                registry=get_str(publish, "registry"),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to release-util.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(ReleaseConfig.from_dict(result.value))


def load_config_or_default(workspace_root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load the workspace config file, or defaults when there is none.

    A present but broken file is still an error.
    """
    path = workspace_root / CONFIG_FILE_NAME
    if not path.is_file():
        return Ok(ReleaseConfig())
    return load_config(path)
