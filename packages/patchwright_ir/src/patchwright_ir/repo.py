from __future__ import annotations

import os
from pathlib import Path

ROOT_ENV_VAR = "PATCHWRIGHT_REPO_ROOT"
IR_PACKAGE_DIR = Path("packages") / "patchwright_ir"


def _is_checkout(candidate: Path) -> bool:
    return (candidate / "pyproject.toml").is_file() and (candidate / IR_PACKAGE_DIR).is_dir()


def repo_root(*, anchor: Path | None = None) -> Path:
    """Find the checkout holding ``packages/patchwright_ir``.

    ``PATCHWRIGHT_REPO_ROOT`` wins when set; otherwise walk up from ``anchor``
    (default: the working directory).
    """
    raw = os.environ.get(ROOT_ENV_VAR)
    if raw:
        root = Path(raw).expanduser()
        if not root.is_absolute():
            raise RuntimeError(f"{ROOT_ENV_VAR} must be absolute: {raw!r}")
        if not _is_checkout(root):
            raise RuntimeError(f"{ROOT_ENV_VAR} is not a patchwright checkout: {root}")
        return root.resolve()

    start = Path(anchor if anchor is not None else Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if _is_checkout(candidate):
            return candidate
    raise RuntimeError(f"no patchwright checkout above {start}")


def schema_dir(*, anchor: Path | None = None) -> Path:
    return repo_root(anchor=anchor) / IR_PACKAGE_DIR / "schema"
