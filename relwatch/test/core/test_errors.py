"""Tests for relwatch.core.errors module."""

from __future__ import annotations

from relwatch.core.errors import ErrorCode


class TestErrorCode:
    """Exit code values are part of the CLI contract."""

    def test_values_are_stable(self) -> None:
        assert [int(code) for code in ErrorCode] == [0, 1, 2, 3, 4, 5]

    def test_severity_follows_value(self) -> None:
        assert max(ErrorCode.GIT_ERROR, ErrorCode.NETWORK_ERROR) is ErrorCode.NETWORK_ERROR
