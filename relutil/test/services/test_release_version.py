from __future__ import annotations

import pytest

from relutil.core.result import Err, Ok
from relutil.services.release.version import (
    VersionTag,
    parse_force_version,
    parse_version_tag,
    strip_marker,
    uses_release_tag_pattern,
)


@pytest.mark.parametrize(
    ("text", "tag"),
    [
        ("0.1.0", "v0.1.0"),
        ("v0.1.0", "v0.1.0"),
        ("  v1.2.3\n", "v1.2.3"),
        ("1.0.0-dev.0", "v1.0.0-dev.0"),
        ("v0.3.0-rc.1+build.5", "v0.3.0-rc.1+build.5"),
    ],
)
def test_parse_version_tag_accepts(text: str, tag: str) -> None:
    result = parse_version_tag(text)
    assert isinstance(result, Ok)
    assert result.value.to_tag() == tag


@pytest.mark.parametrize("text", ["invalid", "vinvalid", "", "v", "1.2", "01.2.3", "1.2.3-", "v1.2.3.4"])
def test_parse_version_tag_rejects(text: str) -> None:
    result = parse_version_tag(text)
    assert isinstance(result, Err)
    assert result.error.kind == "version_format"
    assert "Invalid version format" in result.error.message


def test_version_tag_fields() -> None:
    tag = parse_version_tag("v2.0.0-dev.3").unwrap()
    assert tag == VersionTag(major=2, minor=0, patch=0, prerelease="dev.3")
    assert tag.version == "2.0.0-dev.3"
    assert str(tag) == "v2.0.0-dev.3"
    assert tag.is_prerelease()
    assert not VersionTag(1, 0, 0).is_prerelease()


def test_strip_marker() -> None:
    assert strip_marker("v0.5.1") == "0.5.1"
    assert strip_marker("0.5.1") == "0.5.1"


@pytest.mark.parametrize("text", [None, "", "   "])
def test_empty_force_version_means_no_override(text: str | None) -> None:
    assert parse_force_version(text) == Ok(None)


def test_force_version_is_validated() -> None:
    assert parse_force_version("0.2.0") == Ok(VersionTag(0, 2, 0))
    bad = parse_force_version("vinvalid")
    assert isinstance(bad, Err)
    assert bad.error.kind == "version_format"


@pytest.mark.parametrize(
    ("force", "strict"),
    [
        (None, False),
        (VersionTag(0, 2, 0), True),
        (VersionTag(0, 2, 0, prerelease="dev.0"), False),
        # Only the -dev marker relaxes the pattern.
        (VersionTag(1, 0, 0, prerelease="rc.1"), True),
    ],
)
def test_uses_release_tag_pattern(force: VersionTag | None, strict: bool) -> None:
    assert uses_release_tag_pattern(force) is strict
