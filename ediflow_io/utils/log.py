"""Logging helpers for the ediflow_io package."""

# Module responsibilities:
# - Reuse the core ediflow logging setup (rotating file + console handlers).
# - Provide get_logger() returning loggers scoped under ``ediflow.io``.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ediflow.core.logger import get_logger as core_get_logger


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Logger name suffix appended to the ``ediflow.io`` namespace.
        log_dir: Optional override for the logging directory.

    Returns:
        Configured child logger of the core ``ediflow`` logger.
    """

    return core_get_logger(log_dir).getChild(f"io.{name}")
