"""End-to-end tests of the prepare pipeline against a real Cargo workspace.

These run git-cliff, cargo-workspaces and cargo-semver-checks for real and
are skipped unless all of them are installed.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from relutil.core.result import Err, Ok
from relutil.output.console import MockConsole
from relutil.services.release.manifest import read_current_version
from relutil.services.release.model import BaselineFound, NoPriorRelease, ReleaseContext
from relutil.services.release.resolver import query_version_only, resolve_next_version
from relutil.services.release.service import prepare_release
from relutil.services.release.version import VersionTag
from relutil.test._toml import Inline, write_manifest

INHERIT = Inline({"workspace": True})

_TOOLS = ("git", "git-cliff", "cargo", "cargo-workspaces", "cargo-semver-checks")

pytestmark = pytest.mark.skipif(
    any(shutil.which(tool) is None for tool in _TOOLS),
    reason="release toolchain not installed",
)

CLIFF_TOML = '''\
[changelog]
header = "# Changelog\\n"
body = """
## {{ version | default(value="unreleased") }}
{% for commit in commits %}- {{ commit.message | upper_first }}
{% endfor %}"""

[git]
conventional_commits = true
filter_unconventional = false

[bump]
features_always_bump_minor = false
breaking_always_bump_major = false
'''


def _git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return proc.stdout.strip()


def _commit(root: Path, message: str) -> None:
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", message)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A released 0.1.0 workspace with one library crate."""
    root = tmp_path / "ws"
    crate = root / "crates" / "alpha"
    (crate / "src").mkdir(parents=True)
    write_manifest(
        root / "Cargo.toml",
        {
            "workspace": {
                "resolver": "2",
                "members": ["crates/*"],
                "package": {
                    "version": "0.1.0",
                    "edition": "2021",
                    "license": "MIT",
                    "description": "test",
                },
            }
        },
    )
    write_manifest(
        crate / "Cargo.toml",
        {
            "package": {
                "name": "alpha",
                "version": "0.1.0",
                "edition": INHERIT,
                "license": INHERIT,
                "description": INHERIT,
            }
        },
    )
    (crate / "src" / "lib.rs").write_text("pub fn one() -> u32 { 1 }\n", encoding="utf-8")
    (root / "cliff.toml").write_text(CLIFF_TOML, encoding="utf-8")
    (root / ".gitignore").write_text("target/\n", encoding="utf-8")

    _git(root.parent, "init", "-q", "-b", "main", str(root))
    _git(root, "config", "user.email", "release@example.com")
    _git(root, "config", "user.name", "Release Bot")
    _git(root, "config", "commit.gpgsign", "false")
    _git(root, "config", "tag.gpgsign", "false")
    _commit(root, "feat: initial release")
    _git(root, "tag", "-a", "v0.1.0", "-m", "v0.1.0")
    return root


def _ctx(root: Path, force_tag: VersionTag | None = None) -> ReleaseContext:
    return ReleaseContext(workspace_root=root, cliff_config="cliff.toml", force_tag=force_tag)


def _discard_changes(root: Path) -> None:
    _git(root, "checkout", "-q", "--", ".")
    _git(root, "clean", "-fdq")


def _release(root: Path) -> VersionTag:
    """Prepare, commit and tag the next release."""
    result = prepare_release(_ctx(root), console=MockConsole())
    assert isinstance(result, Ok)
    tag = str(result.value.version)
    _commit(root, f"chore: release {tag}")
    _git(root, "tag", "-a", tag, "-m", tag)
    return result.value.version


def test_chore_after_release_bumps_patch(workspace: Path) -> None:
    (workspace / "README.md").write_text("alpha\n", encoding="utf-8")
    _commit(workspace, "chore: add readme")

    result = query_version_only(_ctx(workspace), console=MockConsole())

    assert result == Ok(VersionTag(0, 1, 1))


def test_feature_after_patch_release_bumps_patch(workspace: Path) -> None:
    (workspace / "README.md").write_text("alpha\n", encoding="utf-8")
    _commit(workspace, "chore: add readme")
    assert _release(workspace) == VersionTag(0, 1, 1)

    lib = workspace / "crates" / "alpha" / "src" / "lib.rs"
    lib.write_text("pub fn one() -> u32 { 1 }\npub fn two() -> u32 { 2 }\n", encoding="utf-8")
    _commit(workspace, "feat: add two")

    result = prepare_release(_ctx(workspace), console=MockConsole())

    assert isinstance(result, Ok)
    assert result.value.version == VersionTag(0, 1, 2)
    assert isinstance(result.value.baseline, BaselineFound)
    assert result.value.baseline.tag == "v0.1.1"
    assert read_current_version(workspace) == Ok("0.1.2")


def test_resolving_twice_gives_same_version(workspace: Path) -> None:
    (workspace / "README.md").write_text("alpha\n", encoding="utf-8")
    _commit(workspace, "fix: add readme")

    first = resolve_next_version(_ctx(workspace), console=MockConsole())
    second = resolve_next_version(_ctx(workspace), console=MockConsole())

    assert first == Ok(VersionTag(0, 1, 1))
    assert second == first


def test_prepare_with_forced_minor(workspace: Path) -> None:
    lib = workspace / "crates" / "alpha" / "src" / "lib.rs"
    lib.write_text("pub fn one() -> u32 { 1 }\npub fn two() -> u32 { 2 }\n", encoding="utf-8")
    _commit(workspace, "feat: add two")

    result = prepare_release(_ctx(workspace, VersionTag(0, 2, 0)), console=MockConsole())

    assert isinstance(result, Ok)
    assert result.value.version == VersionTag(0, 2, 0)
    assert isinstance(result.value.baseline, BaselineFound)
    assert result.value.baseline.tag == "v0.1.0"
    assert read_current_version(workspace) == Ok("0.2.0")
    assert "## v0.2.0" in (workspace / "CHANGELOG.md").read_text(encoding="utf-8")


def test_breaking_change_fails_gate_on_patch(workspace: Path) -> None:
    lib = workspace / "crates" / "alpha" / "src" / "lib.rs"
    lib.write_text("pub fn uno() -> u32 { 1 }\n", encoding="utf-8")
    _commit(workspace, "fix: rename one")

    result = prepare_release(_ctx(workspace), console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "gate_failure"


def test_forced_minor_passes_gate_after_breaking_change(workspace: Path) -> None:
    (workspace / "README.md").write_text("alpha\n", encoding="utf-8")
    _commit(workspace, "chore: add readme")
    assert _release(workspace) == VersionTag(0, 1, 1)
    lib = workspace / "crates" / "alpha" / "src" / "lib.rs"
    lib.write_text("pub fn one() -> u32 { 1 }\npub fn two() -> u32 { 2 }\n", encoding="utf-8")
    _commit(workspace, "feat: add two")
    assert _release(workspace) == VersionTag(0, 1, 2)

    lib.write_text("pub fn uno() -> u32 { 1 }\npub fn two() -> u32 { 2 }\n", encoding="utf-8")
    _commit(workspace, "fix: rename one")

    failed = prepare_release(_ctx(workspace), console=MockConsole())
    assert isinstance(failed, Err)
    assert failed.error.kind == "gate_failure"

    _discard_changes(workspace)
    forced = prepare_release(_ctx(workspace, VersionTag(0, 2, 0)), console=MockConsole())

    assert isinstance(forced, Ok)
    assert forced.value.version == VersionTag(0, 2, 0)
    assert isinstance(forced.value.baseline, BaselineFound)
    assert forced.value.baseline.tag == "v0.1.2"
    assert read_current_version(workspace) == Ok("0.2.0")


def test_first_release_skips_gate(workspace: Path) -> None:
    _git(workspace, "tag", "-d", "v0.1.0")
    console = MockConsole()

    result = prepare_release(_ctx(workspace, VersionTag(0, 2, 0)), console=console)

    assert isinstance(result, Ok)
    assert isinstance(result.value.baseline, NoPriorRelease)
    assert console.has_warning()
