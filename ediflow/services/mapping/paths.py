"""Dot-path access into nested dict/list structures."""

from __future__ import annotations

from typing import Any, List, MutableMapping


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def _step(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key, MISSING)
    if isinstance(value, (list, tuple)) and key.isdigit():
        index = int(key)
        return value[index] if index < len(value) else MISSING
    return MISSING


def get_nested_value(obj: Any, path: str, default: Any = None) -> Any:
    """Walk ``path`` (``a.b.0.c``); a missing key or ``None`` along the way yields ``default``."""

    value = obj
    for key in path.split("."):
        if value is None or value is MISSING:
            return default
        value = _step(value, key)
    if value is MISSING:
        return default
    return value


def set_nested_value(obj: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at ``path``, replacing non-dict intermediates with dicts."""

    keys = path.split(".")
    current: MutableMapping[str, Any] = obj
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


__all__: List[str] = ["MISSING", "get_nested_value", "set_nested_value"]
