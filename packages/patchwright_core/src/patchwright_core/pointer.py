from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Union

from .containers import IndexedContainer, KeyedContainer, PatchableContainer, as_container
from .errors import PatchError, PatchErrorCode

APPEND_MARKER = "-"

_INDEX_RE = re.compile(r"0|[1-9][0-9]*")
_BAD_ESCAPE_RE = re.compile(r"~(?![01])")


@dataclass(frozen=True)
class Location:
    """The slot a pointer names: its owning container plus the final key.

    A Location borrows the container for the span of one operation only.
    """

    container: PatchableContainer
    key: Union[str, int]
    tokens: tuple[str, ...]
    root: Any = field(default=None, compare=False, repr=False)

    @property
    def is_collection(self) -> bool:
        return self.container.is_collection

    @property
    def pointer(self) -> str:
        return "/" + "/".join(escape_token(token) for token in self.tokens)

    def contains(self, other: "Location") -> bool:
        """True when ``other`` is this slot or lies underneath it."""
        return other.tokens[: len(self.tokens)] == self.tokens


def escape_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def parse_pointer(path: str) -> list[str] | PatchError:
    if not isinstance(path, str) or not path.startswith("/"):
        return PatchError(
            code=PatchErrorCode.MALFORMED_PATH,
            path=str(path),
            message="json pointer path must start with '/'",
        )
    parts = path.split("/")[1:]
    if any(_BAD_ESCAPE_RE.search(part) for part in parts):
        return PatchError(
            code=PatchErrorCode.MALFORMED_PATH,
            path=path,
            message="'~' must be followed by '0' or '1'",
        )
    # RFC 6901: decode ~1 before ~0 so "~01" becomes "~1"
    return [part.replace("~1", "/").replace("~0", "~") for part in parts]


def parse_index(token: str) -> int | None:
    if _INDEX_RE.fullmatch(token) is None:
        return None
    return int(token)


def _not_found(path: str, message: str) -> PatchError:
    return PatchError(code=PatchErrorCode.PATH_NOT_FOUND, path=path, message=message)


def _step(container: PatchableContainer, token: str, path: str) -> Any:
    if isinstance(container, IndexedContainer):
        idx = parse_index(token)
        if idx is None:
            return _not_found(path, f"{token!r} is not a valid index into {container.type_name}")
        if idx >= container.length:
            return _not_found(
                path, f"index {idx} out of range (length {container.length})"
            )
        return container.get_item(idx)

    if isinstance(container, KeyedContainer):
        if not container.has_member(token):
            return _not_found(path, f"{container.type_name} has no member {token!r}")
        return container.get_member(token)

    return _not_found(path, f"cannot traverse {container.type_name}")


def resolve(path: str, root: Any) -> Location | PatchError:
    """Resolve ``path`` against ``root`` down to its owning container.

    Every segment but the last is dereferenced; the last one is validated
    and kept as the Location's key so callers can both read and write it.
    """
    tokens = parse_pointer(path)
    if isinstance(tokens, PatchError):
        return tokens
    if not tokens:
        return PatchError(
            code=PatchErrorCode.MALFORMED_PATH,
            path=path,
            message="pointer addresses the document root; an operation needs a container",
        )

    current: Any = root
    declared: Any = Any
    for depth, token in enumerate(tokens):
        container = as_container(current, declared)
        if container is None:
            reached = "/" + "/".join(escape_token(t) for t in tokens[:depth])
            kind = "null" if current is None else type(current).__name__
            return _not_found(path, f"cannot traverse {kind} at {reached!r}")

        if depth == len(tokens) - 1:
            return _terminal(container, token, tokens, path, root)

        declared = container.slot_type(token)
        current = _step(container, token, path)
        if isinstance(current, PatchError):
            return current

    raise AssertionError("unreachable")


def _terminal(
    container: PatchableContainer, token: str, tokens: list[str], path: str, root: Any
) -> Location | PatchError:
    key: Union[str, int] = token
    if container.is_collection and token != APPEND_MARKER:
        idx = parse_index(token)
        if idx is None:
            return PatchError(
                code=PatchErrorCode.MALFORMED_PATH,
                path=path,
                message=f"collection segment must be a non-negative index or '-', got {token!r}",
            )
        key = idx
    return Location(container=container, key=key, tokens=tuple(tokens), root=root)
