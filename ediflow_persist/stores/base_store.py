"""
RESPONSIBILITIES
- Define shared interfaces and exceptions for file-backed stores.
- Outline the init/load/query/healthcheck workflow concrete stores follow.
PROCESS OVERVIEW
1. init_store -> resolve target directory and ensure it exists.
2. load -> read documents from disk, skipping (and logging) unreadable ones.
3. query -> answer lookups from the loaded documents.
4. healthcheck -> verify the directory is present and writable.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


class StoreError(RuntimeError):
    """Base exception type for persistence-layer failures."""


class StoreValidationError(StoreError):
    """Raised when input data fails validation rules."""


class StoreNotFoundError(StoreError):
    """Raised when a record addressed by id does not exist."""


class StoreLockedError(StoreError):
    """Raised when a store file is locked by another writer."""


@dataclass(slots=True)
class PersistHealth:
    """Structured report produced by health checks."""

    writable_paths: dict[str, bool]
    record_counts: dict[str, int] = field(default_factory=dict)
    issues: list[str] = field(default_factory=list)

    def is_healthy(self) -> bool:
        """Return True when no issues are observed."""

        return not self.issues and all(self.writable_paths.values())


class BaseStore(ABC):
    """Abstract class shared by concrete file-backed stores."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def init_store(self) -> Path:
        """Ensure the backing directory exists, returning its absolute path."""

    @abstractmethod
    def healthcheck(self) -> PersistHealth:
        """Run diagnostics for the store and return a structured report."""

    @staticmethod
    def _writable(path: Path) -> bool:
        return path.exists() and os.access(path, os.W_OK)
