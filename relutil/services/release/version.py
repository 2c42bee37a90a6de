from __future__ import annotations

import re
from dataclasses import dataclass

from relutil.core.result import Err, Ok, Result
from relutil.services.release.errors import ReleaseError

TAG_MARKER = "v"

# Pre-release marker that keeps pre-release tags in git-cliff's tag pattern.
DEV_MARKER = "-dev"

_NUM = r"0|[1-9]\d*"
_PRE_IDENT = r"0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*"
_BUILD_IDENT = r"[0-9A-Za-z-]+"
_SEMVER_RE = re.compile(
    rf"^(?P<major>{_NUM})\.(?P<minor>{_NUM})\.(?P<patch>{_NUM})"
    rf"(?:-(?P<pre>(?:{_PRE_IDENT})(?:\.(?:{_PRE_IDENT}))*))?"
    rf"(?:\+(?P<build>{_BUILD_IDENT}(?:\.{_BUILD_IDENT})*))?$"
)


@dataclass(frozen=True, slots=True)
class VersionTag:
    """A semantic version, serialized with a leading `v` (e.g. `v1.2.3-dev.0`)."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @property
    def version(self) -> str:
        """The version without the tag marker, as written into manifests."""
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease is not None:
            out += f"-{self.prerelease}"
        if self.build is not None:
            out += f"+{self.build}"
        return out

    def to_tag(self) -> str:
        return f"{TAG_MARKER}{self.version}"

    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def __str__(self) -> str:
        return self.to_tag()


def strip_marker(text: str) -> str:
    return text.lstrip(TAG_MARKER)


def parse_version_tag(text: str) -> Result[VersionTag, ReleaseError]:
    """Parse a version with or without the leading `v`.

    `1.2.3` and `v1.2.3` both give `v1.2.3`. Anything that is not
    major.minor.patch[-prerelease][+build] is rejected.
    """
    raw = text.strip()
    body = raw[len(TAG_MARKER) :] if raw.startswith(TAG_MARKER) else raw
    m = _SEMVER_RE.match(body)
    if m is None:
        return Err(
            ReleaseError(
                kind="version_format",
                message=f"Invalid version format: {body or raw!r}",
                hint="expected MAJOR.MINOR.PATCH[-PRERELEASE], optionally prefixed with 'v'",
            )
        )
    return Ok(
        VersionTag(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            prerelease=m.group("pre"),
            build=m.group("build"),
        )
    )


def parse_force_version(text: str | None) -> Result[VersionTag | None, ReleaseError]:
    """Normalize an optional version override. Empty means no override."""
    if text is None or not text.strip():
        return Ok(None)
    return parse_version_tag(text)


def uses_release_tag_pattern(force_tag: VersionTag | None) -> bool:
    """Whether only release-form tags may count as previous versions.

    Only a forced tag without the `-dev` marker restricts the pattern. A plain
    substring check, not a pre-release grammar check: `v1.0.0-rc.1` still
    gets the strict pattern.
    """
    return force_tag is not None and DEV_MARKER not in force_tag.to_tag()
