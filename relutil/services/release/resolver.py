from __future__ import annotations

from relutil.core.result import Err, Result
from relutil.output.console import ConsoleProtocol
from relutil.services.release.changelog import materialize_changelog, query_next_version
from relutil.services.release.errors import ReleaseError
from relutil.services.release.model import ReleaseContext
from relutil.services.release.version import VersionTag, parse_version_tag


def resolve_next_version(
    ctx: ReleaseContext, *, console: ConsoleProtocol
) -> Result[VersionTag, ReleaseError]:
    """Update the changelog and return the version git-cliff settled on.

    The forced tag only steers git-cliff; the version it reports back is the
    one propagated downstream.
    """
    written = materialize_changelog(
        workspace_root=ctx.workspace_root,
        cliff_config=ctx.cliff_config,
        force_tag=ctx.force_tag,
        console=console,
    )
    if isinstance(written, Err):
        return written

    return query_version_only(ctx, console=console)


def query_version_only(
    ctx: ReleaseContext, *, console: ConsoleProtocol
) -> Result[VersionTag, ReleaseError]:
    """Resolve the next version without touching CHANGELOG.md."""
    queried = query_next_version(
        workspace_root=ctx.workspace_root,
        cliff_config=ctx.cliff_config,
        force_tag=ctx.force_tag,
        console=console,
    )
    if isinstance(queried, Err):
        return queried

    parsed = parse_version_tag(queried.value)
    if isinstance(parsed, Err):
        return Err(
            ReleaseError(
                kind="parse_failure",
                message=f"git-cliff reported an invalid version: {queried.value!r}",
                hint=parsed.error.hint,
            )
        )

    if ctx.force_tag is not None and parsed.value != ctx.force_tag:
        console.warning(f"git-cliff chose {parsed.value} instead of forced {ctx.force_tag}")
    console.success(f"next version: {parsed.value}")
    return parsed
