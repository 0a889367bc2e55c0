"""Row/column addressable snapshot of a worksheet."""

# Module responsibilities:
# - Decide the cell value type once, at the boundary between workbook readers and the detector.
# - Pad ragged rows so every row has the same width and out-of-range reads return a blank.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from numbers import Integral, Real
from typing import Iterable, Sequence, Tuple, Union

import pandas as pd

CellValue = Union[str, int, float]
BLANK: CellValue = ""


def normalize_cell(value: object) -> CellValue:
    """Collapse an arbitrary workbook value into ``str | int | float``."""

    if value is None:
        return BLANK
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.replace(microsecond=0).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return value
    try:
        if pd.isna(value):
            return BLANK
    except (TypeError, ValueError):
        pass
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, (Real, Decimal)):
        number = float(value)
        return int(number) if number.is_integer() else number
    return str(value)


def is_blank(value: CellValue | None) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def cell_str(value: CellValue | None) -> str:
    """Render a cell the way spreadsheet users read it."""

    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class Grid:
    """Immutable 2D cell snapshot of one sheet."""

    rows: Tuple[Tuple[CellValue, ...], ...]

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[object] | None]) -> "Grid":
        normalized = [tuple(normalize_cell(v) for v in (row or ())) for row in rows]
        width = max((len(r) for r in normalized), default=0)
        padded = tuple(r + (BLANK,) * (width - len(r)) for r in normalized)
        return cls(rows=padded)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def max_width(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    def row(self, index: int) -> Tuple[CellValue, ...]:
        if 0 <= index < self.row_count:
            return self.rows[index]
        return ()

    def cell(self, row: int, col: int) -> CellValue:
        values = self.row(row)
        if 0 <= col < len(values):
            return values[col]
        return BLANK


__all__ = ["BLANK", "CellValue", "Grid", "cell_str", "is_blank", "normalize_cell"]
