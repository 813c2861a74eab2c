from __future__ import annotations

import logging
from typing import Any, Optional

from patchwright_ir import PatchOperation
from pydantic import ValidationError

from .coercion import coerce, deep_equal, empty_value
from .containers import NO_DEFAULT, IndexedContainer, KeyedContainer
from .errors import PatchError, PatchErrorCode
from .pointer import APPEND_MARKER, Location, escape_token, parse_index, resolve

logger = logging.getLogger(__name__)


def _error(code: PatchErrorCode, loc: Location, message: str) -> PatchError:
    return PatchError(code=code, path=loc.pointer, message=message)


def _index_out_of_range(loc: Location, container: IndexedContainer) -> PatchError:
    return _error(
        PatchErrorCode.INDEX_OUT_OF_RANGE,
        loc,
        f"index {loc.key!r} out of range for {container.type_name} of length {container.length}",
    )


def _member_not_found(loc: Location, container: KeyedContainer) -> PatchError:
    return _error(
        PatchErrorCode.MEMBER_NOT_FOUND,
        loc,
        f"{container.type_name} has no settable member {loc.key!r}",
    )


def _closed_member_missing(loc: Location, container: KeyedContainer) -> bool:
    if container.open_members:
        return False
    return not (container.has_member(loc.key) and container.is_settable(loc.key))


def _after_removal(from_loc: Location, to_loc: Location) -> Location | PatchError:
    """Re-target ``to_loc`` at the slot it names once ``from_loc`` is removed.

    Removing a list element shifts its later siblings down by one, so a
    destination that passes through a later sibling of the source must be
    resolved one index further along in the current graph.
    """
    depth = len(from_loc.tokens) - 1
    if not from_loc.is_collection or len(to_loc.tokens) <= depth + 1:
        return to_loc
    if to_loc.tokens[:depth] != from_loc.tokens[:depth]:
        return to_loc
    index = parse_index(to_loc.tokens[depth])
    if index is None or index <= from_loc.key:
        return to_loc
    shifted = (*to_loc.tokens[:depth], str(index + 1), *to_loc.tokens[depth + 1 :])
    return resolve("/" + "/".join(escape_token(token) for token in shifted), to_loc.root)


class PatchExecutor:
    """Runs one resolved operation against the object graph.

    Every method returns ``None`` on success or the ``PatchError`` that
    stopped it. Nothing is written before all checks for that step pass.
    """

    def read(self, loc: Location) -> Any:
        container = loc.container
        if isinstance(container, IndexedContainer):
            if loc.key == APPEND_MARKER or loc.key >= container.length:
                return _error(
                    PatchErrorCode.TARGET_NOT_FOUND,
                    loc,
                    f"no element at index {loc.key!r} (length {container.length})",
                )
            return container.get_item(loc.key)
        if not container.has_member(loc.key):
            return _error(
                PatchErrorCode.TARGET_NOT_FOUND,
                loc,
                f"{container.type_name} has no member {loc.key!r}",
            )
        return container.get_member(loc.key)

    def _write(self, loc: Location, value: Any, *, insert: bool) -> Optional[PatchError]:
        container = loc.container
        try:
            if isinstance(container, IndexedContainer):
                if loc.key == APPEND_MARKER:
                    container.insert_item(container.length, value)
                elif insert:
                    container.insert_item(loc.key, value)
                else:
                    container.set_item(loc.key, value)
            else:
                container.set_member(loc.key, value)
        except ValidationError as exc:
            # validate_assignment models can still veto the write
            return _error(PatchErrorCode.TYPE_CONVERSION_ERROR, loc, str(exc))
        return None

    def _check_add_slot(
        self, loc: Location, *, pending_removals: int = 0
    ) -> Optional[PatchError]:
        container = loc.container
        if isinstance(container, IndexedContainer):
            if loc.key != APPEND_MARKER and loc.key > container.length - pending_removals:
                return _index_out_of_range(loc, container)
            return None
        if _closed_member_missing(loc, container):
            return _member_not_found(loc, container)
        return None

    def add(self, loc: Location, value: Any) -> Optional[PatchError]:
        error = self._check_add_slot(loc)
        if error is not None:
            return error
        coerced = coerce(value, loc.container.slot_type(loc.key), path=loc.pointer)
        if isinstance(coerced, PatchError):
            return coerced
        return self._write(loc, coerced, insert=True)

    def remove(self, loc: Location) -> Optional[PatchError]:
        container = loc.container
        if isinstance(container, IndexedContainer):
            if loc.key == APPEND_MARKER or loc.key >= container.length:
                return _index_out_of_range(loc, container)
            container.pop_item(loc.key)
            return None

        if container.open_members:
            if not container.has_member(loc.key):
                return _error(
                    PatchErrorCode.TARGET_NOT_FOUND,
                    loc,
                    f"{container.type_name} has no member {loc.key!r} to remove",
                )
            container.remove_member(loc.key)
            return None

        if _closed_member_missing(loc, container):
            return _member_not_found(loc, container)
        # Declared members cannot disappear; reset them instead.
        reset = container.member_default(loc.key)
        if reset is NO_DEFAULT:
            reset = empty_value(container.member_type(loc.key), path=loc.pointer)
            if isinstance(reset, PatchError):
                return reset
        return self._write(loc, reset, insert=False)

    def replace(self, loc: Location, value: Any) -> Optional[PatchError]:
        container = loc.container
        if isinstance(container, KeyedContainer) and _closed_member_missing(loc, container):
            return _member_not_found(loc, container)
        current = self.read(loc)
        if isinstance(current, PatchError):
            return current
        coerced = coerce(value, container.slot_type(loc.key), path=loc.pointer)
        if isinstance(coerced, PatchError):
            return coerced
        return self._write(loc, coerced, insert=False)

    def move(self, from_loc: Location, to_loc: Location) -> Optional[PatchError]:
        if from_loc.contains(to_loc):
            return _error(
                PatchErrorCode.INVALID_MOVE,
                to_loc,
                f"cannot move {from_loc.pointer!r} into itself or one of its children",
            )
        value = self.read(from_loc)
        if isinstance(value, PatchError):
            return value
        to_loc = _after_removal(from_loc, to_loc)
        if isinstance(to_loc, PatchError):
            return to_loc
        same_sequence = (
            from_loc.is_collection and from_loc.container.target is to_loc.container.target
        )
        error = self._check_add_slot(to_loc, pending_removals=1 if same_sequence else 0)
        if error is not None:
            return error
        # Convert before removing so a type mismatch leaves the source in place.
        moved = coerce(value, to_loc.container.slot_type(to_loc.key), path=to_loc.pointer)
        if isinstance(moved, PatchError):
            return moved
        error = self.remove(from_loc)
        if error is not None:
            return error
        return self.add(to_loc, moved)

    def copy(self, from_loc: Location, to_loc: Location) -> Optional[PatchError]:
        value = self.read(from_loc)
        if isinstance(value, PatchError):
            return value
        return self.add(to_loc, value)

    def test(self, loc: Location, value: Any) -> Optional[PatchError]:
        current = self.read(loc)
        if isinstance(current, PatchError):
            return current
        expected = coerce(value, loc.container.slot_type(loc.key), path=loc.pointer)
        if isinstance(expected, PatchError):
            return expected
        if not deep_equal(current, expected):
            return _error(
                PatchErrorCode.TEST_FAILED,
                loc,
                f"value at {loc.pointer!r} does not match the expected value",
            )
        return None

    def execute(
        self,
        op: PatchOperation,
        loc: Location,
        from_loc: Location | None = None,
    ) -> Optional[PatchError]:
        logger.debug("executing %s at %s", op.op, loc.pointer)
        if op.op == "add":
            return self.add(loc, op.value)
        if op.op == "remove":
            return self.remove(loc)
        if op.op == "replace":
            return self.replace(loc, op.value)
        if op.op == "test":
            return self.test(loc, op.value)
        if op.op in ("move", "copy"):
            if from_loc is None:
                raise ValueError(f"op {op.op!r} executed without a resolved 'from' location")
            if op.op == "move":
                return self.move(from_loc, loc)
            return self.copy(from_loc, loc)
        raise ValueError(f"unsupported op: {op.op!r}")
