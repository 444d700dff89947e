"""Tests for tagpub.core.result module."""

import pytest

from tagpub.core.result import Err, Ok, Result


class TestOk:
    def test_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_map_err_is_noop(self) -> None:
        assert Ok(42).map_err(lambda e: f"error: {e}") == Ok(42)

    def test_repr(self) -> None:
        assert repr(Ok(42)) == "Ok(42)"

    def test_frozen(self) -> None:
        result = Ok(42)
        with pytest.raises(AttributeError):
            result.value = 0  # type: ignore[misc]


class TestErr:
    def test_map_is_noop(self) -> None:
        result: Result[int, str] = Err("boom")
        assert result.map(lambda x: x * 2) == Err("boom")

    def test_map_err(self) -> None:
        assert Err("boom").map_err(str.upper) == Err("BOOM")

    def test_repr(self) -> None:
        assert repr(Err("boom")) == "Err('boom')"


def test_ok_and_err_are_distinct() -> None:
    assert Ok(1) != Err(1)


def test_match_statement() -> None:
    def describe(result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    assert describe(Ok(1)) == "ok 1"
    assert describe(Err("x")) == "err x"
