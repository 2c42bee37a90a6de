from __future__ import annotations

CHANGELOG_FILE = "CHANGELOG.md"
MANIFEST_FILE = "Cargo.toml"

# git-cliff tag patterns. The strict one only matches release tags, so
# pre-release tags are not considered previous versions.
RELEASE_TAG_PATTERN = r"^v\d+.\d+.\d+$"
ANY_TAG_PATTERN = r"^v\d+.\d+.\d+"

# Crates forced to the new version even when unchanged.
FORCE_VERSION_CRATES = "*"
