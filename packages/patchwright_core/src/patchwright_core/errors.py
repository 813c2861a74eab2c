from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PatchErrorCode(str, Enum):
    MALFORMED_PATH = "MalformedPath"
    PATH_NOT_FOUND = "PathNotFound"
    MEMBER_NOT_FOUND = "MemberNotFound"
    INDEX_OUT_OF_RANGE = "IndexOutOfRange"
    TARGET_NOT_FOUND = "TargetNotFound"
    INVALID_MOVE = "InvalidMove"
    TYPE_CONVERSION_ERROR = "TypeConversionError"
    TEST_FAILED = "TestFailed"


@dataclass(frozen=True)
class PatchError:
    """A resolution or execution failure, returned rather than raised."""

    code: PatchErrorCode
    path: str
    message: str

    def describe(self) -> str:
        return f"{self.code.value}: {self.message} (path={self.path!r})"


class PatchDocumentError(ValueError):
    """The patch document could not be decoded into operations."""
