"""
RESPONSIBILITIES
- Resolve the persistence root and the folders the stores read and write.
PROCESS OVERVIEW
1. resolve_root() expands user input or falls back to the configured data directory.
2. ensure_structure() materializes the requested sub-directories and returns them by name.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

DATA_DIR_ENV = "EDIFLOW_DATA_DIR"
_DEFAULT_SUBDIRS: tuple[str, ...] = ("information-items", "mappings", "code-definitions")


def resolve_root(root: str | os.PathLike[str] | None = None) -> Path:
    """Return the persistence root, defaulting to ``$EDIFLOW_DATA_DIR`` or ./ediflow/work/data."""

    if root is not None:
        base = Path(root)
    elif os.getenv(DATA_DIR_ENV):
        base = Path(os.environ[DATA_DIR_ENV])
    else:
        base = Path.cwd() / "ediflow" / "work" / "data"
    return base.expanduser().resolve()


def ensure_structure(root: str | os.PathLike[str] | None = None, *, subdirs: Iterable[str] | None = None) -> dict[str, Path]:
    """Ensure persistence directories exist and return a mapping."""

    base = resolve_root(root)
    resolved: dict[str, Path] = {"root": base}
    requested = tuple(subdirs) if subdirs is not None else _DEFAULT_SUBDIRS
    base.mkdir(parents=True, exist_ok=True)
    for name in requested:
        target = base / name
        target.mkdir(parents=True, exist_ok=True)
        resolved[name] = target
    return resolved
