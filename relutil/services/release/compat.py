"""API compatibility gate (cargo semver-checks against the last release)."""

from __future__ import annotations

from pathlib import Path
from shutil import which

from relutil.core.result import Err, Ok, Result
from relutil.git.repository import Repository
from relutil.output.console import ConsoleProtocol
from relutil.platform.process import run_silent
from relutil.services.release.changelog import query_released_version
from relutil.services.release.errors import ReleaseError, tool_failure
from relutil.services.release.model import (
    BaselineFound,
    CompatibilityBaseline,
    NoPriorRelease,
    ReleaseContext,
)


def resolve_baseline(
    ctx: ReleaseContext,
    *,
    repo: Repository,
    console: ConsoleProtocol,
) -> Result[CompatibilityBaseline, ReleaseError]:
    """Find the commit of the last released version.

    "No release yet" is a result, not an error: git-cliff reports no released
    version, or the reported tag does not exist in this clone.
    """
    released = query_released_version(
        workspace_root=ctx.workspace_root,
        cliff_config=ctx.cliff_config,
        force_tag=ctx.force_tag,
        console=console,
    )
    if isinstance(released, Err):
        return released

    tag = released.value
    if tag is None:
        return Ok(NoPriorRelease(reason="git-cliff found no released version"))

    console.info(f"Retrieving revision for tag: {tag}")
    revision = repo.resolve_tag(tag)
    if isinstance(revision, Err):
        e = revision.error
        return Err(
            ReleaseError(
                kind="git_operation",
                message=f"failed to resolve released tag {tag}",
                hint=e.message,
            )
        )
    if revision.value is None:
        return Ok(NoPriorRelease(reason=f"tag {tag} not found in repository"))
    return Ok(BaselineFound(tag=tag, revision=revision.value))


def run_semver_checks(
    *,
    workspace_root: Path,
    baseline_rev: str,
    default_features_only: bool,
) -> Result[None, ReleaseError]:
    cmd = [
        "cargo",
        "semver-checks",
        "--workspace",
        "--baseline-rev",
        baseline_rev,
    ]
    if default_features_only:
        cmd.append("--default-features")

    # An unknown cargo subcommand is just a non-zero exit.
    if which("cargo") is None or which("cargo-semver-checks") is None:
        return Err(
            ReleaseError(
                kind="tool_invocation",
                message="cargo semver-checks: missing",
                hint="Install cargo-semver-checks: cargo install cargo-semver-checks",
            )
        )

    result = run_silent(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        e = result.error
        if e.not_found:
            return Err(tool_failure("semver checks", e))
        return Err(
            ReleaseError(
                kind="gate_failure",
                message=f"semver checks failed against {baseline_rev[:12]} (exit {e.returncode})",
                hint="breaking API change: force a version with a major (or 0.x minor) bump",
            )
        )
    return Ok(None)


def run_compatibility_gate(
    ctx: ReleaseContext,
    *,
    repo: Repository,
    console: ConsoleProtocol,
) -> Result[CompatibilityBaseline, ReleaseError]:
    """Check the working tree against the last release; skip when there is none."""
    baseline = resolve_baseline(ctx, repo=repo, console=console)
    if isinstance(baseline, Err):
        return baseline

    match baseline.value:
        case NoPriorRelease(reason=reason):
            console.warning(f"No previous release found, skipping semver checks: {reason}")
            return baseline
        case BaselineFound(tag=tag, revision=revision):
            console.step(f"Running semver checks against {tag} ({revision[:12]})")
            checked = run_semver_checks(
                workspace_root=ctx.workspace_root,
                baseline_rev=revision,
                default_features_only=ctx.default_features_only,
            )
            if isinstance(checked, Err):
                return checked
            console.success(f"semver checks passed against {tag}")
            return baseline
