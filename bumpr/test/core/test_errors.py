"""Tests for bumpr.core.errors module."""

from bumpr.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract and must stay stable."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.NOT_FOUND == 3
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.CONFLICT == 5
        assert ErrorCode.AUTH_ERROR == 6
        assert ErrorCode.API_ERROR == 7

    def test_two_is_left_for_usage_errors(self) -> None:
        assert 2 not in {int(code) for code in ErrorCode}

    def test_codes_are_unique(self) -> None:
        values = [int(code) for code in ErrorCode]
        assert len(values) == len(set(values))


class TestErrorCodeUsage:
    def test_str_is_readable(self) -> None:
        assert str(ErrorCode.NETWORK_ERROR) == "network error"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.CONFLICT.is_success

    def test_is_error(self) -> None:
        assert ErrorCode.AUTH_ERROR.is_error
        assert not ErrorCode.OK.is_error
