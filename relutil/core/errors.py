"""Exit codes for the release-util CLI.

Every failure kind of the release pipeline maps to one of these codes, so CI
jobs can tell a bad input apart from a broken toolchain or a failed gate.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    These values are used as process exit codes and should remain stable:
    - 0: Success (including "not releasable" and idempotent no-ops)
    - 1: User error (malformed version override, bad config)
    - 2: Environment error (external tool missing or exited non-zero)
    - 3: Check error (compatibility gate failed, unexpected tool output)
    - 4: Git error (tag, push or revision lookup failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    CHECK_ERROR = 3
    GIT_ERROR = 4
