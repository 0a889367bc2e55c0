"""Data-type coercion, named transformations and single-comparator conditions."""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Mapping

import pandas as pd

from ediflow.core.errors import CoercionError

from .paths import MISSING, get_nested_value

LOGGER = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T")
_ISO_DATETIME_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
# Longer operators first so ``>=`` is not read as ``>`` followed by ``=...``.
_CONDITION = re.compile(r"^\s*([\w.]+)\s*(===|!==|==|!=|>=|<=|>|<)\s*(.+?)\s*$")
_TRUTHY = {"true", "1", "yes", "○"}


def display_string(value: Any) -> str:
    """Render a value the way message payloads compare it (``true``, ``null``, ``10``)."""

    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else display_string(v) for v in value)
    return str(value)


def to_number(value: Any) -> float:
    """Loose numeric reading used by ordering comparisons; ``nan`` when not numeric."""

    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _convert_string(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return display_string(value)


def _convert_number(value: Any) -> int | float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        match = _NUMBER_PREFIX.match(value.replace(",", "").strip())
        if match:
            text = match.group(0)
            if "." in text or "e" in text.lower():
                return float(text)
            return int(text)
    raise CoercionError(f"Cannot convert to number: {value}")


def _parse_timestamp(value: str, fmt: str | None) -> pd.Timestamp:
    try:
        parsed = pd.to_datetime(value, format=fmt) if fmt else pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError) as exc:
        raise CoercionError(f"Invalid ISO8601 date string: {value}") from exc
    if pd.isna(parsed):
        raise CoercionError(f"Invalid ISO8601 date string: {value}")
    return parsed


def _convert_date(value: Any, fmt: str | None = None) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        if _ISO_DATE.match(value):
            return value
        if _ISO_DATE_PREFIX.match(value):
            return value.split("T", 1)[0]
        return _parse_timestamp(value, fmt).strftime("%Y-%m-%d")
    raise CoercionError(f"Date conversion failed: invalid date value: {value}")


def _convert_datetime(value: Any, fmt: str | None = None) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, date):
        return f"{value.isoformat()}T00:00:00"
    if isinstance(value, str):
        if _ISO_DATETIME_PREFIX.match(value):
            return value
        return _parse_timestamp(value, fmt).strftime("%Y-%m-%dT%H:%M:%S")
    raise CoercionError(f"Datetime conversion failed: invalid datetime value: {value}")


def _convert_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, (int, float)):
        return value != 0
    return bool(value)


def convert(value: Any, data_type: str | None, fmt: str | None = None) -> Any:
    """Coerce ``value`` into ``data_type``.

    ``None`` and unknown data types pass through untouched.

    Raises:
        CoercionError: When the value cannot be represented as ``data_type``.
    """

    if value is None:
        return value
    if data_type == "string":
        return _convert_string(value)
    if data_type == "number":
        return _convert_number(value)
    if data_type == "date":
        return _convert_date(value, fmt)
    if data_type == "datetime":
        return _convert_datetime(value, fmt)
    if data_type == "boolean":
        return _convert_boolean(value)
    if data_type == "code":
        # Codes are not checked against the code definitions here.
        return _convert_string(value)
    return value


def _numeric(value: Any) -> float:
    number = to_number(value)
    if math.isnan(number):
        raise CoercionError(f"Not a number: {value}")
    return number


def _round_half_up(value: Any) -> int:
    return math.floor(_numeric(value) + 0.5)


def _as_int_if_whole(number: float) -> int | float:
    return int(number) if number.is_integer() else number


TRANSFORMATIONS: Dict[str, Callable[[Any], Any]] = {
    "uppercase": lambda v: display_string(v).upper(),
    "lowercase": lambda v: display_string(v).lower(),
    "trim": lambda v: display_string(v).strip(),
    "abs": lambda v: _as_int_if_whole(abs(_numeric(v))),
    "round": _round_half_up,
    "floor": lambda v: math.floor(_numeric(v)),
    "ceil": lambda v: math.ceil(_numeric(v)),
    "toISO8601Date": _convert_date,
    "toISO8601DateTime": _convert_datetime,
}


def apply_transformation(value: Any, transformation: str | None) -> Any:
    """Apply a named transformation; unknown names leave the value unchanged."""

    if not transformation:
        return value
    func = TRANSFORMATIONS.get(transformation)
    if func is None:
        LOGGER.warning("Unknown transformation: %s", transformation)
        return value
    return func(value)


def evaluate_condition(condition: str, data: Mapping[str, Any]) -> bool:
    """Evaluate ``<path> <op> <literal>`` against ``data``.

    Equality operators compare rendered strings, ordering operators compare
    numbers. Anything that does not parse evaluates to ``False``.

    >>> evaluate_condition("count >= 10", {"count": 10})
    True
    """

    match = _CONDITION.match(condition or "")
    if not match:
        LOGGER.warning("Condition evaluation failed: %s", condition)
        return False

    path, operator, literal = match.groups()
    expected = re.sub(r"['\"]", "", literal)
    actual = get_nested_value(data, path, default=MISSING)

    if operator in ("===", "=="):
        return display_string(actual) == expected
    if operator in ("!==", "!="):
        return display_string(actual) != expected

    left, right = to_number(actual), to_number(expected)
    if operator == ">":
        return left > right
    if operator == "<":
        return left < right
    if operator == ">=":
        return left >= right
    return left <= right


__all__ = [
    "TRANSFORMATIONS",
    "apply_transformation",
    "convert",
    "display_string",
    "evaluate_condition",
    "to_number",
]
