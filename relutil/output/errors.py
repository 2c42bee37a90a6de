"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relutil.core.errors import ErrorCode
from relutil.output.console import Style
from relutil.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from relutil.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a pipeline failure with its hint."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error.kind:
        case "version_format" | "config_invalid":
            return int(ErrorCode.USER_ERROR)
        case "tool_invocation":
            return int(ErrorCode.ENV_ERROR)
        case "parse_failure" | "manifest_invalid" | "gate_failure":
            return int(ErrorCode.CHECK_ERROR)
        case "git_operation":
            return int(ErrorCode.GIT_ERROR)
