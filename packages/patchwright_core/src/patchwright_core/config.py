from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MAX_OPERATIONS = 1_000
DEFAULT_MAX_DOCUMENT_BYTES = 1_000_000


def _env_int(
    name: str,
    default: int,
    *,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        value = default
    else:
        try:
            value = int(raw)
        except ValueError as exc:
            raise RuntimeError(f"{name} must be an integer") from exc
    if minimum is not None and value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise RuntimeError(f"{name} must be <= {maximum}")
    return value


@dataclass(frozen=True)
class PatchEngineConfig:
    max_operations: int = DEFAULT_MAX_OPERATIONS
    max_document_bytes: int = DEFAULT_MAX_DOCUMENT_BYTES

    @classmethod
    def from_env(cls) -> "PatchEngineConfig":
        return cls(
            max_operations=_env_int(
                "PATCHWRIGHT_MAX_OPERATIONS",
                DEFAULT_MAX_OPERATIONS,
                minimum=1,
            ),
            max_document_bytes=_env_int(
                "PATCHWRIGHT_MAX_DOCUMENT_BYTES",
                DEFAULT_MAX_DOCUMENT_BYTES,
                minimum=1,
            ),
        )
