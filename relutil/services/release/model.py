from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relutil.git.repository import TagOutcome
from relutil.services.release.version import VersionTag


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Inputs of one prepare/generate run."""

    workspace_root: Path
    cliff_config: str  # path or URL
    force_tag: VersionTag | None = None
    # Only check the default feature set (for crates with clashing features).
    default_features_only: bool = False


@dataclass(frozen=True, slots=True)
class PublishContext:
    """Inputs of one publish run. Every value is explicit, including the token."""

    workspace_root: Path
    git_token: str
    repository: str | None  # owner/name, used for the release title
    release_label: str
    allow_branch: str
    remote: str = "origin"
    registry: str | None = None
    # Testing only.
    skip_releasable_check: bool = False
    skip_forge_release: bool = False


@dataclass(frozen=True, slots=True)
class BaselineFound:
    tag: str
    revision: str


@dataclass(frozen=True, slots=True)
class NoPriorRelease:
    reason: str


CompatibilityBaseline = BaselineFound | NoPriorRelease


@dataclass(frozen=True, slots=True)
class Releasable:
    pr_number: int


@dataclass(frozen=True, slots=True)
class NotReleasable:
    reason: str
    matches: int = 0


ReleasabilitySignal = Releasable | NotReleasable


@dataclass(frozen=True, slots=True)
class PrepareOutcome:
    version: VersionTag
    baseline: CompatibilityBaseline


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    published: bool
    tag: str | None = None
    tag_outcome: TagOutcome | None = None
    pr_number: int | None = None
    forge_release: bool = False
