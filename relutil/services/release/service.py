from __future__ import annotations

from pathlib import Path

from relutil.core.result import Err, Ok, Result
from relutil.git.repository import GitError, Repository
from relutil.output.console import ConsoleProtocol
from relutil.services.release.compat import run_compatibility_gate
from relutil.services.release.errors import ReleaseError
from relutil.services.release.gh import check_releasable, create_forge_release, ensure_gh_available
from relutil.services.release.manifest import (
    read_current_version,
    set_workspace_version,
    verify_workspace_versions,
)
from relutil.services.release.model import (
    NotReleasable,
    PrepareOutcome,
    PublishContext,
    PublishOutcome,
    Releasable,
    ReleaseContext,
)
from relutil.services.release.publish import publish_workspace
from relutil.services.release.resolver import resolve_next_version
from relutil.services.release.version import VersionTag, parse_version_tag


def open_repository(workspace_root: Path) -> Result[Repository, ReleaseError]:
    repo = Repository(workspace_root)
    if not repo.exists():
        return Err(
            ReleaseError(
                kind="git_operation",
                message=f"not a git repository: {workspace_root}",
                hint="Run from the workspace root or pass --dir",
            )
        )
    return Ok(repo)


def _git_failure(step: str, error: GitError) -> ReleaseError:
    return ReleaseError(kind="git_operation", message=f"{step}: {error.message}")


def generate_release(
    ctx: ReleaseContext, *, console: ConsoleProtocol
) -> Result[VersionTag, ReleaseError]:
    """Update the changelog and set the next version in every manifest.

    Nothing is committed; the caller commits the resulting diff.
    """
    version = resolve_next_version(ctx, console=console)
    if isinstance(version, Err):
        return version

    written = set_workspace_version(
        workspace_root=ctx.workspace_root, version=version.value, console=console
    )
    if isinstance(written, Err):
        return written

    verified = verify_workspace_versions(ctx.workspace_root, version.value)
    if isinstance(verified, Err):
        return verified

    console.success(f"workspace set to {version.value.version}")
    return version


def prepare_release(
    ctx: ReleaseContext, *, console: ConsoleProtocol
) -> Result[PrepareOutcome, ReleaseError]:
    """Prepare the next release and gate it behind the semver checks.

    - Generates the changelog and asks git-cliff for the next version.
    - Sets that version in all Cargo manifests.
    - Runs cargo semver-checks against the last released tag, if any.
    """
    repo = open_repository(ctx.workspace_root)
    if isinstance(repo, Err):
        return repo

    version = generate_release(ctx, console=console)
    if isinstance(version, Err):
        return version

    baseline = run_compatibility_gate(ctx, repo=repo.value, console=console)
    if isinstance(baseline, Err):
        return baseline

    return Ok(PrepareOutcome(version=version.value, baseline=baseline.value))


def _check_head_releasable(
    ctx: PublishContext, *, repo: Repository, console: ConsoleProtocol
) -> Result[int | None, ReleaseError]:
    available = ensure_gh_available()
    if isinstance(available, Err):
        return available

    head = repo.head_sha()
    if isinstance(head, Err):
        return Err(_git_failure("resolve HEAD", head.error))

    signal = check_releasable(
        workspace_root=ctx.workspace_root,
        head_sha=head.value,
        release_label=ctx.release_label,
        console=console,
        repository=ctx.repository,
    )
    if isinstance(signal, Err):
        return signal

    match signal.value:
        case Releasable(pr_number=number):
            console.success(f"Found releasable change with PR number: {number}")
            return Ok(number)
        case NotReleasable(reason=reason):
            console.info(reason)
            return Ok(None)


def publish_release(
    ctx: PublishContext, *, console: ConsoleProtocol
) -> Result[PublishOutcome, ReleaseError]:
    """Publish a release if HEAD is a releasable change.

    - Checks HEAD came from a merged PR with the release label; stops
      successfully otherwise.
    - Tags HEAD with the version of the root Cargo.toml and pushes the tag.
    - Publishes the crates, then creates the GitHub release.

    Every step is safe to repeat on the same commit.
    """
    repo = open_repository(ctx.workspace_root)
    if isinstance(repo, Err):
        return repo

    pr_number: int | None = None
    if not ctx.skip_releasable_check:
        releasable = _check_head_releasable(ctx, repo=repo.value, console=console)
        if isinstance(releasable, Err):
            return releasable
        if releasable.value is None:
            console.info("Not a releasable change, stopping.")
            return Ok(PublishOutcome(published=False))
        pr_number = releasable.value

    if not ctx.skip_forge_release and not ctx.repository:
        return Err(
            ReleaseError(
                kind="config_invalid",
                message="repository name required to create the GitHub release",
                hint="Pass --repository owner/name or set GITHUB_REPOSITORY",
            )
        )

    current = read_current_version(ctx.workspace_root)
    if isinstance(current, Err):
        return current
    version = parse_version_tag(current.value)
    if isinstance(version, Err):
        return version
    tag = version.value.to_tag()

    console.step(f"Tagging HEAD with {tag}")
    tagged = repo.value.tag_head(tag, tag)
    if isinstance(tagged, Err):
        return Err(_git_failure("tag release", tagged.error))
    match tagged.value:
        case "unchanged":
            console.info(f"Tag '{tag}' already exists for HEAD")
        case "moved":
            console.info(f"Updated existing tag '{tag}' to point to HEAD")
        case "created":
            console.success(f"Tagged current HEAD with: {tag}")

    console.step(f"Pushing {tag} to {ctx.remote}")
    pushed = repo.value.push_tag(
        tag,
        token=ctx.git_token,
        remote=ctx.remote,
        force=tagged.value == "moved",
    )
    if isinstance(pushed, Err):
        return Err(_git_failure("push tag", pushed.error))
    console.success(f"Pushed tag to remote: {tag}")

    published = publish_workspace(
        workspace_root=ctx.workspace_root,
        allow_branch=ctx.allow_branch,
        registry=ctx.registry,
        console=console,
    )
    if isinstance(published, Err):
        return published

    created = False
    if not ctx.skip_forge_release and ctx.repository:
        release = create_forge_release(
            workspace_root=ctx.workspace_root,
            tag=tag,
            repository=ctx.repository,
            console=console,
        )
        if isinstance(release, Err):
            return release
        created = release.value

    return Ok(
        PublishOutcome(
            published=True,
            tag=tag,
            tag_outcome=tagged.value,
            pr_number=pr_number,
            forge_release=created,
        )
    )
