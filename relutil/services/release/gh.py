from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path

from relutil.core.result import Err, Ok, Result
from relutil.core.structured import as_obj_list, as_str_dict, get_int, get_list, get_str
from relutil.output.console import ConsoleProtocol
from relutil.platform.process import run as run_process
from relutil.services.release.errors import ReleaseError, tool_failure
from relutil.services.release.model import NotReleasable, Releasable, ReleasabilitySignal
from relutil.services.release.version import strip_marker


@dataclass(frozen=True, slots=True)
class MergedPullRequest:
    number: int
    labels: tuple[str, ...]


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="tool_invocation",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def list_merged_prs_for_commit(
    *, workspace_root: Path, sha: str, repository: str | None = None
) -> Result[list[MergedPullRequest], ReleaseError]:
    cmd = [
        "gh",
        "pr",
        "list",
        "--search",
        sha,
        "--state",
        "merged",
        "--json",
        "id,number,labels",
    ]
    if repository:
        cmd.extend(["--repo", repository])
    result = run_process(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        return Err(tool_failure("gh pr list", result.error))
    return parse_pr_list(result.value)


def parse_pr_list(stdout: str) -> Result[list[MergedPullRequest], ReleaseError]:
    """Parse `gh pr list --json id,number,labels` output."""
    try:
        obj: object = json.loads(stdout)
    except json.JSONDecodeError as e:
        return Err(_shape_error(f"failed to parse `gh pr list` output: {e}"))

    raw = as_obj_list(obj)
    if raw is None:
        return Err(_shape_error("expected a JSON array from `gh pr list`"))

    out: list[MergedPullRequest] = []
    for item in raw:
        d = as_str_dict(item)
        if d is None:
            return Err(_shape_error("expected a JSON object value as PR list output"))

        number = get_int(d, "number")
        if number is None or number < 0:
            return Err(_shape_error("missing 'number' in PR data"))

        labels_raw = get_list(d, "labels")
        if labels_raw is None:
            return Err(_shape_error(f"missing 'labels' in PR #{number} data"))

        labels: list[str] = []
        for label_obj in labels_raw:
            label = as_str_dict(label_obj)
            name = get_str(label, "name") if label is not None else None
            if name is None:
                return Err(_shape_error(f"expected label objects with a name in PR #{number}"))
            labels.append(name)

        out.append(MergedPullRequest(number=number, labels=tuple(labels)))
    return Ok(out)


def decide_releasability(
    matches: list[MergedPullRequest], release_label: str
) -> ReleasabilitySignal:
    """Releasable only for exactly one merged PR carrying the release label."""
    if not matches:
        return NotReleasable(reason="no merged PR found for HEAD", matches=0)
    if len(matches) > 1:
        numbers = ", ".join(f"#{pr.number}" for pr in matches)
        return NotReleasable(
            reason=f"ambiguous: several merged PRs match HEAD ({numbers})",
            matches=len(matches),
        )

    pr = matches[0]
    if release_label not in pr.labels:
        return NotReleasable(
            reason=f"PR #{pr.number} is missing the '{release_label}' label",
            matches=1,
        )
    return Releasable(pr_number=pr.number)


def check_releasable(
    *,
    workspace_root: Path,
    head_sha: str,
    release_label: str,
    console: ConsoleProtocol,
    repository: str | None = None,
) -> Result[ReleasabilitySignal, ReleaseError]:
    """Whether HEAD came from a merged PR labelled for release."""
    console.step("Checking for a releasable change")
    matches = list_merged_prs_for_commit(
        workspace_root=workspace_root, sha=head_sha, repository=repository
    )
    if isinstance(matches, Err):
        return matches

    for pr in matches.value:
        console.info(f"PR #{pr.number} labels: {', '.join(pr.labels) or '(none)'}")
    return Ok(decide_releasability(matches.value, release_label))


def release_title(repository: str, tag: str) -> str:
    """`<repo name> <version>`, e.g. `holochain 0.5.1` for `holochain/holochain`."""
    name = repository.rstrip("/").rsplit("/", 1)[-1]
    return f"{name} {strip_marker(tag)}"


def forge_release_exists(*, workspace_root: Path, tag: str, repository: str) -> bool:
    result = run_process(
        ["gh", "release", "view", tag, "--repo", repository, "--json", "tagName"],
        cwd=workspace_root,
    )
    return isinstance(result, Ok)


def create_forge_release(
    *,
    workspace_root: Path,
    tag: str,
    repository: str,
    console: ConsoleProtocol,
) -> Result[bool, ReleaseError]:
    """Create the GitHub release for `tag` with generated notes.

    Returns Ok(False) when the release already exists.
    """
    title = release_title(repository, tag)
    console.step(f"Creating GitHub release: {title}")
    if forge_release_exists(workspace_root=workspace_root, tag=tag, repository=repository):
        console.info(f"GitHub release for {tag} already exists")
        return Ok(False)

    cmd = [
        "gh",
        "release",
        "create",
        tag,
        "--repo",
        repository,
        "--generate-notes",
        "--title",
        title,
    ]
    result = run_process(cmd, cwd=workspace_root)
    if isinstance(result, Err):
        return Err(tool_failure("gh release create", result.error))
    url = result.value.strip()
    if url:
        console.info(url)
    return Ok(True)


def _shape_error(message: str) -> ReleaseError:
    return ReleaseError(kind="parse_failure", message=message, hint="gh pr list --json")
