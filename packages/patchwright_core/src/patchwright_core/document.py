from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from patchwright_ir import PatchOperation
from pydantic import ValidationError

from .config import PatchEngineConfig
from .errors import PatchDocumentError


def encode_patch_size_bytes(patch_ops: Iterable[PatchOperation]) -> int:
    payload = [
        op.model_dump(mode="json", by_alias=True, exclude_unset=True) for op in patch_ops
    ]
    return len(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))


def _decode_text(raw: str | bytes, *, config: PatchEngineConfig) -> Any:
    data = raw.encode("utf-8") if isinstance(raw, str) else raw
    if len(data) > config.max_document_bytes:
        raise PatchDocumentError(
            f"patch too large: {len(data)} bytes (max {config.max_document_bytes})"
        )
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise PatchDocumentError(f"invalid JSON: {exc}") from exc


def _validate_op(op_index: int, raw_op: Any) -> PatchOperation:
    if isinstance(raw_op, PatchOperation):
        return raw_op
    if not isinstance(raw_op, Mapping):
        raise PatchDocumentError(f"operation {op_index}: patch operations must be objects")
    try:
        return PatchOperation.model_validate(dict(raw_op))
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ())) or 'op'}: {err.get('msg')}"
            for err in exc.errors()
        )
        raise PatchDocumentError(f"operation {op_index}: {details}") from exc


def parse_patch_document(
    raw: str | bytes | Sequence[PatchOperation | Mapping[str, Any]],
    *,
    config: PatchEngineConfig | None = None,
) -> list[PatchOperation]:
    """Decode a JSON Patch document into validated operations.

    Accepts wire text or an already-decoded list. Raises ``PatchDocumentError``
    for malformed JSON, unknown op kinds or members, missing ``from``/``value``,
    and documents over the configured size limits.
    """
    if config is None:
        config = PatchEngineConfig.from_env()

    decoded: Any = raw
    if isinstance(raw, (str, bytes, bytearray)):
        decoded = _decode_text(bytes(raw) if isinstance(raw, bytearray) else raw, config=config)

    if not isinstance(decoded, Sequence) or isinstance(decoded, (str, bytes)):
        raise PatchDocumentError("patch document must be a JSON array of operations")
    if len(decoded) > config.max_operations:
        raise PatchDocumentError(
            f"patch too large: {len(decoded)} ops (max {config.max_operations})"
        )

    ops = [_validate_op(op_index, raw_op) for op_index, raw_op in enumerate(decoded)]

    if not isinstance(raw, (str, bytes, bytearray)):
        try:
            size_bytes = encode_patch_size_bytes(ops)
        except ValueError as exc:
            raise PatchDocumentError(f"patch values are not JSON serialisable: {exc}") from exc
        if size_bytes > config.max_document_bytes:
            raise PatchDocumentError(
                f"patch too large: {size_bytes} bytes (max {config.max_document_bytes})"
            )
    return ops
