from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from .models import PatchOperation, PatchResult
from .repo import schema_dir


def _write_schema(path: Path, schema: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def main() -> None:
    target_dir = schema_dir(anchor=Path(__file__))
    _write_schema(
        target_dir / "patchwright.operation.v0.json",
        TypeAdapter(list[PatchOperation]).json_schema(by_alias=True),
    )
    _write_schema(target_dir / "patchwright.result.v0.json", PatchResult.model_json_schema())


if __name__ == "__main__":
    main()
