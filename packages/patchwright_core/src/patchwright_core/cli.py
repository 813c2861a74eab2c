from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .config import PatchEngineConfig
from .document import parse_patch_document
from .engine import patch


def canonical_json(value: Any) -> str:
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="patchwright",
        description="Apply or validate RFC 6902 JSON Patch documents.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Apply a patch to a JSON document.")
    apply_parser.add_argument("--doc", dest="doc_path", type=Path, required=True)
    apply_parser.add_argument("--patch", dest="patch_path", type=Path, required=True)
    apply_parser.add_argument("--out", dest="out_path", type=Path, required=False)

    validate_parser = subparsers.add_parser("validate", help="Validate a patch document.")
    validate_parser.add_argument("--patch", dest="patch_path", type=Path, required=True)

    return parser.parse_args(argv)


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        config = PatchEngineConfig.from_env()
        raw_patch = args.patch_path.read_text(encoding="utf-8")

        if args.command == "validate":
            ops = parse_patch_document(raw_patch, config=config)
            print(canonical_json({"valid": True, "operations": len(ops)}))
            return 0

        if args.command == "apply":
            doc = json.loads(args.doc_path.read_text(encoding="utf-8"))
            result = patch(raw_patch, doc, config=config)
            report = result.model_dump(mode="json")
            if args.out_path is not None:
                _write_text(args.out_path, canonical_json(doc) + "\n")
            else:
                report["document"] = doc
            print(canonical_json(report))
            return 0 if result.succeeded else 1
    except Exception as exc:  # noqa: BLE001
        print(str(exc), file=sys.stderr)
        return 1

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
