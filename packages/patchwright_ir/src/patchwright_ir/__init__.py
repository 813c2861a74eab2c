from .models import (
    FROM_OPS,
    OP_KINDS,
    VALUE_OPS,
    OpKind,
    PatchFailureReason,
    PatchOperation,
    PatchResult,
)
from .repo import repo_root, schema_dir

__all__ = [
    "FROM_OPS",
    "OP_KINDS",
    "OpKind",
    "PatchFailureReason",
    "PatchOperation",
    "PatchResult",
    "VALUE_OPS",
    "repo_root",
    "schema_dir",
]

__version__ = "0.1.0"
