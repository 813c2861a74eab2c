from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from patchwright_ir import FROM_OPS, PatchFailureReason, PatchOperation, PatchResult

from .config import PatchEngineConfig
from .document import parse_patch_document
from .errors import PatchDocumentError, PatchError
from .executor import PatchExecutor
from .pointer import resolve

logger = logging.getLogger(__name__)

RawOperations = str | bytes | Sequence[PatchOperation | Mapping[str, Any]]


def _halt(op_index: int, reason: PatchFailureReason, message: str) -> PatchResult:
    logger.info("patch halted at op %s: %s: %s", op_index, reason.value, message)
    return PatchResult.failure(reason, message)


def apply_operations(target: Any, operations: Iterable[PatchOperation]) -> PatchResult:
    """Apply ``operations`` to ``target`` in order, stopping at the first failure.

    The target is mutated in place and nothing is rolled back: operations
    before the failing one stay applied.
    """
    executor = PatchExecutor()
    for op_index, op in enumerate(operations):
        loc = resolve(op.path, target)
        if isinstance(loc, PatchError):
            return _halt(op_index, PatchFailureReason.COULD_NOT_PARSE_PATH, loc.describe())

        from_loc = None
        if op.op in FROM_OPS:
            from_loc = resolve(op.from_path or "", target)
            if isinstance(from_loc, PatchError):
                return _halt(
                    op_index, PatchFailureReason.COULD_NOT_PARSE_FROM, from_loc.describe()
                )

        error = executor.execute(op, loc, from_loc)
        if error is not None:
            reason = (
                PatchFailureReason.TEST_FAILED
                if op.op == "test"
                else PatchFailureReason.OPERATION_FAILED
            )
            return _halt(op_index, reason, error.describe())
        logger.debug("applied op %s: %s %s", op_index, op.op, op.path)

    return PatchResult.success()


def patch(
    raw_operations: RawOperations,
    target: Any,
    *,
    config: PatchEngineConfig | None = None,
) -> PatchResult:
    """Decode ``raw_operations`` if needed, then apply them to ``target``."""
    if isinstance(raw_operations, Sequence) and not isinstance(
        raw_operations, (str, bytes)
    ) and all(isinstance(op, PatchOperation) for op in raw_operations):
        return apply_operations(target, raw_operations)

    try:
        operations = parse_patch_document(raw_operations, config=config)
    except PatchDocumentError as exc:
        return _halt(-1, PatchFailureReason.COULD_NOT_PARSE_JSON, str(exc))
    return apply_operations(target, operations)
