"""Application logger for EdiFlow commands and services.

Service modules log through ``logging.getLogger(__name__)``; handlers are only
attached here, once, to the ``ediflow`` logger.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from .settings import _work_dir

LOG_LEVEL_ENV = "EDIFLOW_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3

_LOGGER: logging.Logger | None = None


def resolve_level(name: str | int) -> int:
    """Translate ``DEBUG``/``info``/``20`` style input into a logging level."""

    if isinstance(name, int):
        return name
    value = getattr(logging, str(name).strip().upper(), None)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {name}")
    return value


def get_logger(log_dir: Path | None = None, level: str | int | None = None) -> logging.Logger:
    """Return the ``ediflow`` logger writing to work/logs/edi.log and stdout.

    The first call attaches a rotating file handler and a console handler;
    later calls return the same logger. ``$EDIFLOW_LOG_LEVEL`` seeds the level.
    """
    global _LOGGER
    if _LOGGER is not None:
        if level is not None:
            set_level(level)
        return _LOGGER

    base = _work_dir() / "logs" if log_dir is None else Path(log_dir)
    base.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("ediflow")
    logger.setLevel(resolve_level(level or os.getenv(LOG_LEVEL_ENV) or logging.INFO))
    logger.propagate = False

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        RotatingFileHandler(base / "edi.log", maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"),
        logging.StreamHandler(sys.stdout),
    ]
    for handler in handlers:
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    _LOGGER = logger
    return logger


def set_level(level: str | int) -> int:
    """Apply ``level`` to the root and ``ediflow`` loggers and return it."""

    value = resolve_level(level)
    logging.getLogger().setLevel(value)
    logging.getLogger("ediflow").setLevel(value)
    return value


__all__ = ["LOG_FORMAT", "get_logger", "resolve_level", "set_level"]
