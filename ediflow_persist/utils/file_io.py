"""
RESPONSIBILITIES
- Guard store files against concurrent writers with a cooperative lock.
- Replace files atomically so readers never observe a half-written document.
PROCESS OVERVIEW
1. file_lock() acquires an in-process lock and a ``.lock`` sidecar file.
2. atomic_write_text() writes to a temporary sibling and swaps it into place.
"""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ediflow_persist.stores.base_store import StoreLockedError

_IN_PROCESS_LOCKS: dict[Path, threading.RLock] = {}
_LOCK_REGISTRY_GUARD = threading.Lock()


def _acquire_inprocess_lock(path: Path) -> threading.RLock:
    with _LOCK_REGISTRY_GUARD:
        lock = _IN_PROCESS_LOCKS.get(path)
        if lock is None:
            lock = threading.RLock()
            _IN_PROCESS_LOCKS[path] = lock
        return lock


@contextmanager
def file_lock(path: Path) -> Iterator[None]:
    """Hold the store lock for ``path`` for the duration of the block."""

    path = path.resolve()
    inproc = _acquire_inprocess_lock(path)
    if not inproc.acquire(timeout=10):
        raise StoreLockedError(f"Timeout acquiring in-process lock for {path}")
    lock_path = path.with_suffix(path.suffix + ".lock")
    fd: int | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        os.write(fd, str(os.getpid()).encode("ascii"))
        yield
    except FileExistsError as exc:
        raise StoreLockedError(f"Store file appears locked: {lock_path}") from exc
    finally:
        if fd is not None:
            os.close(fd)
            os.unlink(lock_path)
        inproc.release()


def atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    os.replace(tmp_path, path)
