from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

OpKind = Literal["add", "remove", "replace", "move", "copy", "test"]

OP_KINDS: tuple[str, ...] = ("add", "remove", "replace", "move", "copy", "test")
VALUE_OPS = frozenset({"add", "replace", "test"})
FROM_OPS = frozenset({"move", "copy"})


class PatchFailureReason(str, Enum):
    COULD_NOT_PARSE_JSON = "CouldNotParseJson"
    COULD_NOT_PARSE_PATH = "CouldNotParsePath"
    COULD_NOT_PARSE_FROM = "CouldNotParseFrom"
    OPERATION_FAILED = "OperationFailed"
    TEST_FAILED = "TestFailed"


class PatchOperation(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)
    op: OpKind
    path: str
    from_path: Optional[str] = Field(default=None, alias="from")
    value: Optional[Any] = None

    @property
    def has_value(self) -> bool:
        # An explicit JSON null is a value; an absent member is not.
        return "value" in self.model_fields_set

    @model_validator(mode="after")
    def _check_required_members(self) -> "PatchOperation":
        if self.op in FROM_OPS and self.from_path is None:
            raise ValueError(f"op {self.op!r} requires 'from'")
        if self.op in VALUE_OPS and not self.has_value:
            raise ValueError(f"op {self.op!r} requires 'value'")
        return self


class PatchResult(BaseModel):
    """Outcome of one patch call: success, or the first failure with its reason."""

    model_config = ConfigDict(extra="forbid", frozen=True)
    succeeded: bool
    failure_reason: Optional[PatchFailureReason] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "PatchResult":
        if self.succeeded and self.failure_reason is not None:
            raise ValueError("a successful result cannot carry a failure_reason")
        if not self.succeeded and self.failure_reason is None:
            raise ValueError("a failed result requires a failure_reason")
        return self

    @classmethod
    def success(cls) -> "PatchResult":
        return cls(succeeded=True)

    @classmethod
    def failure(cls, reason: PatchFailureReason, message: str) -> "PatchResult":
        return cls(succeeded=False, failure_reason=reason, message=message)
