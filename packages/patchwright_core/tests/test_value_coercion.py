from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from patchwright_core import PatchError, PatchErrorCode, coerce, deep_equal, empty_value


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class Point(BaseModel):
    x: int
    y: int
    label: Optional[str] = None


@dataclass
class Span:
    start: int
    end: int


def test_coerce_matches_shapes_to_declared_types() -> None:
    assert coerce(3, int) == 3
    assert coerce(3, float) == 3.0
    assert coerce("red", Color) is Color.RED
    assert coerce([1, 2], list[int]) == [1, 2]
    assert coerce([1, 2], tuple[int, int]) == (1, 2)
    assert coerce({"x": 1, "y": 2}, Point) == Point(x=1, y=2)
    assert coerce({"start": 0, "end": 4}, Span) == Span(start=0, end=4)
    assert coerce(None, Optional[int]) is None


def test_coerce_refuses_stringy_and_truthy_conversions() -> None:
    cases = [
        ("1", int),
        (1, bool),
        (1.5, int),
        (1, str),
        ("green", Color),
        ({"x": 1}, Point),
        (None, int),
    ]
    for value, expected_type in cases:
        result = coerce(value, expected_type, path="/slot")
        assert isinstance(result, PatchError), (value, expected_type)
        assert result.code == PatchErrorCode.TYPE_CONVERSION_ERROR
        assert result.path == "/slot"


def test_coerce_error_names_target_type() -> None:
    result = coerce("abc", int)
    assert isinstance(result, PatchError)
    assert "int" in result.message

    result = coerce("abc", list[int])
    assert isinstance(result, PatchError)
    assert "list[int]" in result.message


def test_coerce_respects_field_constraints() -> None:
    class Bounded(BaseModel):
        level: int = Field(ge=0, le=5)

    assert isinstance(coerce({"level": 9}, Bounded), PatchError)
    assert coerce({"level": 2}, Bounded).level == 2


def test_coerce_returns_fresh_objects() -> None:
    source = {"nested": [1, 2]}
    untyped = coerce(source, Any)
    assert untyped == source
    assert untyped["nested"] is not source["nested"]

    point = Point(x=1, y=2)
    copied = coerce(point, Point)
    assert copied == point
    assert copied is not point


def test_empty_value_per_type() -> None:
    assert empty_value(Optional[Point]) is None
    assert empty_value(Any) is None
    assert empty_value(str) == ""
    assert empty_value(int) == 0
    assert empty_value(bool) is False
    assert empty_value(list[int]) == []
    assert empty_value(dict[str, int]) == {}

    result = empty_value(Point, path="/p")
    assert isinstance(result, PatchError)
    assert result.code == PatchErrorCode.TYPE_CONVERSION_ERROR


def test_deep_equal_is_structural() -> None:
    assert deep_equal({"a": [1, {"b": None}]}, {"a": [1, {"b": None}]})
    assert deep_equal(Point(x=1, y=2), Point(x=1, y=2))
    assert deep_equal(1, 1.0)
    assert not deep_equal([1, 2], [2, 1])
    assert not deep_equal({"a": 1}, {"a": 1, "b": 2})
    assert not deep_equal(True, 1)
    assert not deep_equal(0, False)
    assert not deep_equal("1", 1)
