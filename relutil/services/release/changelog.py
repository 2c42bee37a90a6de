"""git-cliff adapter.

git-cliff is used in three ways:

- write mode updates CHANGELOG.md for the unreleased commits,
- query mode runs the same bump logic with `--context` and reports the
  version it would release,
- latest mode (`--latest --context`) reports the last released version.

The adapter never retries. Exit codes and the JSON shape of `--context` are
checked strictly, except that "no released version" is a normal answer in
latest mode.
"""

from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import urlsplit

from relutil.core.result import Err, Ok, Result
from relutil.core.structured import StrDict, as_obj_list, as_str_dict
from relutil.output.console import ConsoleProtocol
from relutil.platform.process import run as run_process
from relutil.platform.process import run_silent
from relutil.services.release.config import (
    ANY_TAG_PATTERN,
    CHANGELOG_FILE,
    RELEASE_TAG_PATTERN,
)
from relutil.services.release.errors import ReleaseError, tool_failure
from relutil.services.release.version import VersionTag, uses_release_tag_pattern


def is_config_url(cliff_config: str) -> bool:
    """True for absolute URLs; anything else is treated as a local path."""
    parts = urlsplit(cliff_config)
    # A single letter scheme is a Windows drive, not a URL.
    if len(parts.scheme) < 2:
        return False
    return bool(parts.netloc) or parts.scheme == "file"


def cliff_base_command(cliff_config: str, force_tag: VersionTag | None) -> list[str]:
    cmd = ["git-cliff", "--use-branch-tags"]
    if is_config_url(cliff_config):
        cmd.extend(["--config-url", cliff_config])
    else:
        cmd.extend(["--config", cliff_config])

    pattern = RELEASE_TAG_PATTERN if uses_release_tag_pattern(force_tag) else ANY_TAG_PATTERN
    cmd.extend(["--tag-pattern", pattern])
    return cmd


def materialize_changelog(
    *,
    workspace_root: Path,
    cliff_config: str,
    force_tag: VersionTag | None,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Write the unreleased changes into CHANGELOG.md (create or prepend)."""
    console.step("Generating changelog")

    cmd = cliff_base_command(cliff_config, force_tag)
    cmd.append("--unreleased")

    if (workspace_root / CHANGELOG_FILE).exists():
        console.info(f"{CHANGELOG_FILE} exists, prepending new changes")
        cmd.extend(["--prepend", CHANGELOG_FILE])
    else:
        console.info(f"{CHANGELOG_FILE} does not exist, creating it")
        cmd.extend(["--output", CHANGELOG_FILE])

    if force_tag is not None:
        console.info(f"Forcing tag: {force_tag}")
        cmd.extend(["--tag", force_tag.to_tag()])
    else:
        cmd.append("--bump")

    result = run_silent(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        return Err(tool_failure("generate changelog", result.error))
    return Ok(None)


def query_next_version(
    *,
    workspace_root: Path,
    cliff_config: str,
    force_tag: VersionTag | None,
    console: ConsoleProtocol,
) -> Result[str, ReleaseError]:
    """Ask git-cliff which version the unreleased changes would be released as."""
    console.step("Retrieving next version")

    cmd = cliff_base_command(cliff_config, force_tag)
    cmd.extend(["--unreleased", "--bump", "--context"])
    if force_tag is not None:
        cmd.extend(["--tag", force_tag.to_tag()])

    result = run_process(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        return Err(tool_failure("query next version", result.error))
    return parse_cliff_version(result.value)


def query_released_version(
    *,
    workspace_root: Path,
    cliff_config: str,
    force_tag: VersionTag | None,
    console: ConsoleProtocol,
) -> Result[str | None, ReleaseError]:
    """Ask git-cliff for the latest released version.

    Returns Ok(None) when the history has no release yet.
    """
    console.step("Retrieving released version tag")

    cmd = cliff_base_command(cliff_config, force_tag)
    cmd.extend(["--latest", "--context"])

    result = run_process(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        return Err(tool_failure("query released version", result.error))

    entries = _parse_context(result.value)
    if isinstance(entries, Err):
        return entries
    if not entries.value:
        return Ok(None)

    first = entries.value[0]
    version = first.get("version")
    if version is None:
        return Ok(None)
    if not isinstance(version, str) or not version.strip():
        return Err(_shape_error("expected a string as the version in git-cliff output"))
    return Ok(version.strip())


def parse_cliff_version(stdout: str) -> Result[str, ReleaseError]:
    """Extract the first entry's version from `git-cliff --context` output."""
    entries = _parse_context(stdout)
    if isinstance(entries, Err):
        return entries
    if not entries.value:
        return Err(_shape_error("no value in git-cliff output list"))

    version = entries.value[0].get("version")
    if version is None:
        return Err(_shape_error("expected 'version' in git-cliff output"))
    if not isinstance(version, str) or not version.strip():
        return Err(_shape_error("expected a string as the version in git-cliff output"))
    return Ok(version.strip())


def _parse_context(stdout: str) -> Result[list[StrDict], ReleaseError]:
    try:
        obj: object = json.loads(stdout)
    except json.JSONDecodeError as e:
        return Err(_shape_error(f"unexpected output from git-cliff: {e}"))

    items = as_obj_list(obj)
    if items is None:
        return Err(_shape_error("expected a list in git-cliff output"))

    out: list[StrDict] = []
    for item in items:
        entry = as_str_dict(item)
        if entry is None:
            return Err(_shape_error("expected an object in git-cliff output list"))
        out.append(entry)
    return Ok(out)


def _shape_error(message: str) -> ReleaseError:
    return ReleaseError(kind="parse_failure", message=message, hint="git-cliff --context")
