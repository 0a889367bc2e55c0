"""JSON document output helpers."""

# Module responsibilities:
# - Write ingestion documents with a stable layout (UTF-8, indent 2, insertion-ordered keys).
# - Read them back for the table store and the output validator.

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .utils.log import get_logger

logger = get_logger("json_writer")


def write_json_document(path: Path, payload: Any) -> Path:
    """Serialize ``payload`` to ``path``, creating parent directories.

    Returns:
        The written path.
    """

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    path.write_text(text + "\n", encoding="utf-8")
    logger.info("Wrote %s", path.name, extra={"path": str(path)})
    return path


def read_json_document(path: Path) -> Any:
    """Load a JSON document written by :func:`write_json_document`."""

    with Path(path).open("r", encoding="utf-8") as fh:
        return json.load(fh)
