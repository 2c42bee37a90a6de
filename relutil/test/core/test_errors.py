"""Tests for relutil.core.errors module."""

from relutil.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract and must stay stable."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.CHECK_ERROR == 3
        assert ErrorCode.GIT_ERROR == 4

    def test_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_usable_as_exit_code(self) -> None:
        assert int(ErrorCode.CHECK_ERROR) == 3
