"""Error payload shared by every release pipeline step."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from relutil.platform.process import ProcessError

ReleaseErrorKind = Literal[
    "version_format",
    "config_invalid",
    "tool_invocation",
    "parse_failure",
    "manifest_invalid",
    "gate_failure",
    "git_operation",
]

_INSTALL_HINTS: dict[str, str] = {
    "git-cliff": "Install git-cliff: cargo install git-cliff",
    "cargo": "Install Rust: https://rustup.rs/",
    "gh": "Install GitHub CLI: https://cli.github.com/",
    "git": "Install git: https://git-scm.com/",
}


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def tool_failure(step: str, error: ProcessError) -> ReleaseError:
    """Describe a failed external tool invocation for the given step."""
    if error.not_found:
        return ReleaseError(
            kind="tool_invocation",
            message=f"{step}: {error.program} not found",
            hint=_INSTALL_HINTS.get(error.program),
        )
    detail = error.stderr.strip() or error.stdout.strip()
    return ReleaseError(
        kind="tool_invocation",
        message=f"{step}: {error}",
        hint=detail.splitlines()[-1] if detail else None,
    )
