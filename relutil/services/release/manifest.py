"""Cargo manifest versioning.

Writing is delegated to `cargo workspaces version`; reading and verifying
is done here with tomllib.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from relutil.core.result import Err, Ok, Result
from relutil.core.structured import StrDict, as_str_dict, get_list, get_str, get_table
from relutil.output.console import ConsoleProtocol
from relutil.platform.process import run_silent
from relutil.services.release.config import FORCE_VERSION_CRATES, MANIFEST_FILE
from relutil.services.release.errors import ReleaseError, tool_failure
from relutil.services.release.version import VersionTag


def set_workspace_version(
    *,
    workspace_root: Path,
    version: VersionTag,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Set every crate of the workspace to `version`. Nothing is committed."""
    console.step(f"Setting version to {version.version}")
    cmd = [
        "cargo",
        "workspaces",
        "version",
        "--no-git-commit",
        "--yes",
        "custom",
        version.version,
        "--force",
        FORCE_VERSION_CRATES,
    ]
    result = run_silent(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        return Err(tool_failure("set workspace version", result.error))
    return Ok(None)


def load_manifest(path: Path) -> Result[StrDict, ReleaseError]:
    try:
        data: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(_invalid(f"manifest not found: {path}"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(_invalid(f"failed to read {path}: {e}"))
    except tomllib.TOMLDecodeError as e:
        return Err(_invalid(f"invalid TOML in {path}: {e}"))

    table = as_str_dict(data)
    if table is None:
        return Err(_invalid(f"expected root to be a table: {path}"))
    return Ok(table)


def current_version_from_manifest(data: StrDict) -> str | None:
    """`[workspace.package].version` for workspaces, `[package].version` otherwise."""
    workspace = get_table(data, "workspace")
    if workspace is not None:
        source = get_table(workspace, "package")
    else:
        source = get_table(data, "package")
    if source is None:
        return None
    return get_str(source, "version")


def read_current_version(workspace_root: Path) -> Result[str, ReleaseError]:
    manifest = load_manifest(workspace_root / MANIFEST_FILE)
    if isinstance(manifest, Err):
        return manifest

    version = current_version_from_manifest(manifest.value)
    if version is None:
        return Err(_invalid(f"no version in {workspace_root / MANIFEST_FILE}"))
    return Ok(version)


def member_manifests(
    workspace_root: Path, data: StrDict
) -> Result[list[Path], ReleaseError]:
    """Manifests of the workspace members matched by `members` minus `exclude`.

    A member pattern of `.` is the root package itself and is not listed.
    """
    workspace = get_table(data, "workspace")
    if workspace is None:
        return Ok([])

    root = workspace_root.resolve()
    excluded = {
        (workspace_root / p).resolve()
        for p in (get_list(workspace, "exclude") or [])
        if isinstance(p, str)
    }
    found: list[Path] = []
    for pattern in get_list(workspace, "members") or []:
        if not isinstance(pattern, str):
            continue
        pattern = pattern.strip().removeprefix("./").rstrip("/")
        if pattern in ("", "."):
            continue
        try:
            member_dirs = sorted(workspace_root.glob(pattern))
        except (ValueError, NotImplementedError, IndexError) as e:
            return Err(_invalid(f"invalid workspace member pattern {pattern!r}: {e}"))

        for member_dir in member_dirs:
            resolved = member_dir.resolve()
            manifest = member_dir / MANIFEST_FILE
            if resolved == root or resolved in excluded or not manifest.is_file():
                continue
            if manifest not in found:
                found.append(manifest)
    return Ok(found)


def _package_version_ok(package: StrDict, expected: str) -> bool:
    """A package matches when it declares `expected`, inherits it, or has no version."""
    value = package.get("version")
    if value is None:
        return True
    if isinstance(value, str):
        return value == expected
    inherited = as_str_dict(value)
    return inherited is not None and inherited.get("workspace") is True


def _root_version_ok(data: StrDict, expected: str) -> bool:
    workspace = get_table(data, "workspace")
    shared = get_table(workspace, "package") if workspace is not None else None
    if shared is not None and "version" in shared:
        if get_str(shared, "version") != expected:
            return False
    # A workspace root may also be a package of its own.
    package = get_table(data, "package")
    return package is None or _package_version_ok(package, expected)


def verify_workspace_versions(
    workspace_root: Path, expected: VersionTag
) -> Result[None, ReleaseError]:
    """Check every manifest that declares or inherits a version is at `expected`.

    Virtual workspaces without `[workspace.package]` and members without a
    version (unpublished crates) are not mismatches.
    """
    root = load_manifest(workspace_root / MANIFEST_FILE)
    if isinstance(root, Err):
        return root

    members = member_manifests(workspace_root, root.value)
    if isinstance(members, Err):
        return members

    mismatched: list[str] = []
    if not _root_version_ok(root.value, expected.version):
        mismatched.append(MANIFEST_FILE)

    for path in members.value:
        member = load_manifest(path)
        if isinstance(member, Err):
            return member
        package = get_table(member.value, "package")
        if package is None or not _package_version_ok(package, expected.version):
            mismatched.append(str(path.relative_to(workspace_root)))

    if mismatched:
        return Err(
            _invalid(
                f"manifests not at version {expected.version}: {', '.join(mismatched)}",
            )
        )
    return Ok(None)


def _invalid(message: str) -> ReleaseError:
    return ReleaseError(kind="manifest_invalid", message=message)
