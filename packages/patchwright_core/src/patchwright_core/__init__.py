from .coercion import coerce, deep_equal, empty_value
from .config import PatchEngineConfig
from .containers import (
    DataclassContainer,
    IndexedContainer,
    KeyedContainer,
    MappingContainer,
    ModelContainer,
    PatchableContainer,
    as_container,
    register_container,
    unregister_container,
)
from .document import encode_patch_size_bytes, parse_patch_document
from .engine import apply_operations, patch
from .errors import PatchDocumentError, PatchError, PatchErrorCode
from .executor import PatchExecutor
from .pointer import APPEND_MARKER, Location, parse_pointer, resolve

__all__ = [
    "APPEND_MARKER",
    "DataclassContainer",
    "IndexedContainer",
    "KeyedContainer",
    "Location",
    "MappingContainer",
    "ModelContainer",
    "PatchDocumentError",
    "PatchEngineConfig",
    "PatchError",
    "PatchErrorCode",
    "PatchExecutor",
    "PatchableContainer",
    "apply_operations",
    "as_container",
    "coerce",
    "deep_equal",
    "empty_value",
    "encode_patch_size_bytes",
    "parse_patch_document",
    "parse_pointer",
    "patch",
    "register_container",
    "resolve",
    "unregister_container",
]

__version__ = "0.1.0"
