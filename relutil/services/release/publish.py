from __future__ import annotations

from pathlib import Path

from relutil.core.result import Err, Ok, Result
from relutil.output.console import ConsoleProtocol
from relutil.platform.process import run_silent
from relutil.services.release.errors import ReleaseError, tool_failure


def publish_workspace(
    *,
    workspace_root: Path,
    allow_branch: str,
    registry: str | None,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Publish every crate of the workspace in dependency order.

    Versions already on the registry are skipped by cargo-workspaces, so
    publishing the same release twice succeeds.
    """
    console.step("Publishing crates")
    cmd = [
        "cargo",
        "workspaces",
        "publish",
        "--allow-branch",
        allow_branch,
        "--publish-as-is",
    ]
    if registry is not None:
        cmd.extend(["--registry", registry])

    result = run_silent(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        return Err(tool_failure("publish workspace", result.error))
    return Ok(None)
