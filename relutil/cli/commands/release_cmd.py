from __future__ import annotations

from pathlib import Path

import typer

from relutil.cli.commands._helpers import exit_with_error, unwrap_or_exit
from relutil.cli.context import CLIContext, build_context
from relutil.output.console import Style
from relutil.services.release.errors import ReleaseError
from relutil.services.release.model import (
    BaselineFound,
    NoPriorRelease,
    PublishContext,
    ReleaseContext,
)
from relutil.services.release.resolver import query_version_only
from relutil.services.release.service import generate_release, prepare_release, publish_release
from relutil.services.release.version import parse_force_version

_CLIFF_CONFIG_HELP = (
    "Location of the git-cliff configuration: a file path or a URL "
    "(defaults to [changelog].config in release-util.toml)."
)
_FORCE_VERSION_HELP = (
    "Force the release version instead of letting git-cliff pick the next one. "
    "Use it to switch to a pre-release or back to a release line. "
    "An empty value is the same as not passing the option."
)


def _workspace_dir(ctx: typer.Context) -> Path:
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("dir"), Path):
        return obj["dir"]
    return Path(".")


def _release_context(
    cli: CLIContext,
    *,
    cliff_config: str | None,
    force_version: str | None,
    default_features_only: bool = False,
) -> ReleaseContext:
    config_ref = cliff_config or cli.config.changelog.config
    if not config_ref:
        exit_with_error(
            ReleaseError(
                kind="config_invalid",
                message="missing git-cliff configuration",
                hint="Pass --cliff-config or set [changelog].config in release-util.toml",
            ),
            cli,
        )

    # Validate before anything touches the workspace.
    force_tag = unwrap_or_exit(parse_force_version(force_version), cli)
    return ReleaseContext(
        workspace_root=cli.workspace_root,
        cliff_config=config_ref,
        force_tag=force_tag,
        default_features_only=default_features_only,
    )


def prepare(
    ctx: typer.Context,
    cliff_config: str | None = typer.Option(None, "--cliff-config", help=_CLIFF_CONFIG_HELP),
    force_version: str | None = typer.Option(
        None, "--force-version", help=_FORCE_VERSION_HELP
    ),
    default_features_only: bool = typer.Option(
        False,
        "--default-features-only",
        help="Run semver checks against the default feature set only "
        "(for crates whose features cannot all be enabled together).",
    ),
) -> None:
    """Prepare changes for the next release.

    Generates the changelog, sets the next version in every Cargo.toml and
    runs semver checks against the last release.
    """
    cli = build_context(_workspace_dir(ctx))
    release_ctx = _release_context(
        cli,
        cliff_config=cliff_config,
        force_version=force_version,
        default_features_only=default_features_only,
    )

    outcome = unwrap_or_exit(prepare_release(release_ctx, console=cli.console), cli)

    cli.console.success(f"prepared release {outcome.version}")
    match outcome.baseline:
        case BaselineFound(tag=tag):
            cli.console.print(f"compatible with {tag}", Style.DIM)
        case NoPriorRelease():
            cli.console.print("first release: no compatibility baseline", Style.DIM)
    cli.console.print("commit the changes to continue the release", Style.DIM)


def generate(
    ctx: typer.Context,
    cliff_config: str | None = typer.Option(None, "--cliff-config", help=_CLIFF_CONFIG_HELP),
    force_version: str | None = typer.Option(
        None, "--force-version", help=_FORCE_VERSION_HELP
    ),
) -> None:
    """Generate the changelog and set the next version, without semver checks."""
    cli = build_context(_workspace_dir(ctx))
    release_ctx = _release_context(cli, cliff_config=cliff_config, force_version=force_version)

    version = unwrap_or_exit(generate_release(release_ctx, console=cli.console), cli)
    cli.console.success(f"generated release {version}")


def next_version(
    ctx: typer.Context,
    cliff_config: str | None = typer.Option(None, "--cliff-config", help=_CLIFF_CONFIG_HELP),
    force_version: str | None = typer.Option(
        None, "--force-version", help=_FORCE_VERSION_HELP
    ),
) -> None:
    """Print the next version tag without changing any file."""
    cli = build_context(_workspace_dir(ctx))
    release_ctx = _release_context(cli, cliff_config=cliff_config, force_version=force_version)

    version = unwrap_or_exit(query_version_only(release_ctx, console=cli.console), cli)
    typer.echo(version.to_tag())


def publish(
    ctx: typer.Context,
    token: str = typer.Option(
        ...,
        "--token",
        envvar="GH_TOKEN",
        help="Token used to push the release tag.",
        show_default=False,
    ),
    repository: str | None = typer.Option(
        None,
        "--repository",
        envvar="GITHUB_REPOSITORY",
        help="owner/name of the GitHub repository (titles the GitHub release).",
    ),
    release_label: str | None = typer.Option(
        None, "--release-label", help="PR label that marks a change as releasable."
    ),
    allow_branch: str | None = typer.Option(
        None, "--allow-branch", help="Branch pattern cargo-workspaces may publish from."
    ),
    registry: str | None = typer.Option(None, "--registry", help="Cargo registry name."),
    remote: str | None = typer.Option(None, "--remote", help="Git remote to push the tag to."),
    danger_skip_releasable_changes_check: bool = typer.Option(
        False, "--danger-skip-releasable-changes-check", hidden=True
    ),
    danger_skip_create_gh_release: bool = typer.Option(
        False, "--danger-skip-create-gh-release", hidden=True
    ),
) -> None:
    """Publish a release if HEAD is a releasable change."""
    cli = build_context(_workspace_dir(ctx))
    settings = cli.config.publish

    publish_ctx = PublishContext(
        workspace_root=cli.workspace_root,
        git_token=token,
        repository=repository,
        release_label=release_label or settings.release_label,
        allow_branch=allow_branch or settings.allow_branch,
        remote=remote or settings.remote,
        registry=registry or settings.registry,
        skip_releasable_check=danger_skip_releasable_changes_check,
        skip_forge_release=danger_skip_create_gh_release,
    )

    outcome = unwrap_or_exit(publish_release(publish_ctx, console=cli.console), cli)
    if outcome.published:
        cli.console.success(f"released {outcome.tag}")
