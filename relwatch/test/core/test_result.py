"""Tests for relwatch.core.result module."""

from __future__ import annotations

import pytest

from relwatch.core.result import Err, Ok, Result


class TestResult:
    """Results are consumed with match statements throughout the code base."""

    @staticmethod
    def _describe(result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    def test_match_ok(self) -> None:
        assert self._describe(Ok(3)) == "ok 3"

    def test_match_err(self) -> None:
        assert self._describe(Err("x")) == "err x"

    def test_equality_by_value(self) -> None:
        assert Ok(1) == Ok(1)
        assert Ok(1) != Err(1)

    def test_frozen(self) -> None:
        result = Ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]
