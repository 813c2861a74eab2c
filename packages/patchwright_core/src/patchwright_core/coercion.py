from __future__ import annotations

import copy
import types
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Annotated, Any, Union, get_args, get_origin

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from .containers import unwrap_type
from .errors import PatchError, PatchErrorCode

_ANY_ADAPTER = TypeAdapter(Any)

_EMPTY_BY_ORIGIN: dict[Any, Any] = {
    list: list,
    MutableSequence: list,
    Sequence: list,
    dict: dict,
    MutableMapping: dict,
    Mapping: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    str: str,
    bytes: bytes,
    bool: bool,
    int: int,
    float: float,
}


def type_name(expected_type: Any) -> str:
    if isinstance(expected_type, type) and get_args(expected_type) == ():
        return expected_type.__name__
    return str(expected_type).replace("typing.", "")


def _conversion_error(expected_type: Any, path: str, detail: str) -> PatchError:
    return PatchError(
        code=PatchErrorCode.TYPE_CONVERSION_ERROR,
        path=path,
        message=f"the value could not be converted to type {type_name(expected_type)}: {detail}",
    )


def coerce(value: Any, expected_type: Any, *, path: str = "") -> Any:
    """Convert ``value`` to ``expected_type``, or return a ``PatchError``.

    The value is projected to JSON and validated in strict mode, so the
    decoded shape has to match the target type: no "1" -> 1 or 1 -> True.
    The result never aliases ``value``.
    """
    if expected_type is Any or expected_type is object:
        return copy.deepcopy(value)

    try:
        payload = _ANY_ADAPTER.dump_json(value, by_alias=True)
    except ValueError as exc:
        return _conversion_error(expected_type, path, f"value is not serialisable ({exc})")

    try:
        adapter = TypeAdapter(expected_type)
    except PydanticSchemaGenerationError as exc:
        return _conversion_error(expected_type, path, f"unsupported target type ({exc})")

    try:
        return adapter.validate_json(payload, strict=True)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.error_count() else {}
        return _conversion_error(expected_type, path, str(first.get("msg", exc)))


def _allows_none(expected_type: Any) -> bool:
    if expected_type is Any or expected_type is None or expected_type is type(None):
        return True
    origin = get_origin(expected_type)
    if origin is Annotated:
        return _allows_none(get_args(expected_type)[0])
    if origin is Union or origin is types.UnionType:
        return any(_allows_none(arg) for arg in get_args(expected_type))
    return False


def empty_value(expected_type: Any, *, path: str = "") -> Any:
    """Value a closed member is reset to when it is removed."""
    if _allows_none(expected_type):
        return None
    base = unwrap_type(expected_type)
    factory = _EMPTY_BY_ORIGIN.get(get_origin(base) or base)
    if factory is None:
        return _conversion_error(expected_type, path, "type has no empty value")
    return factory()


def _jsonable(value: Any) -> Any:
    return _ANY_ADAPTER.dump_python(value, mode="json", by_alias=True)


def _equal(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(_equal(left[key], right[key]) for key in left)
    return type(left) is type(right) and left == right


def deep_equal(left: Any, right: Any) -> bool:
    """Structural JSON equality; arrays are order-sensitive, booleans are not numbers."""
    try:
        return _equal(_jsonable(left), _jsonable(right))
    except ValueError:
        return left == right
