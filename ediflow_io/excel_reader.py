"""Workbook input helpers producing :class:`Grid` snapshots."""

# Module responsibilities:
# - Read every sheet of an Excel workbook (or a single CSV) into positional grids.
# - Keep absolute row/column positions: leading blank rows and columns are preserved.
# - Emit structured logs for traceability.

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pandas as pd
from openpyxl import load_workbook

from .grid import Grid
from .utils.log import get_logger

logger = get_logger("excel_reader")

_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def _sheet_grid(ws) -> Grid:
    if ws.max_row == 1 and ws.max_column == 1 and ws.cell(row=1, column=1).value is None:
        return Grid.from_rows([])
    rows = ws.iter_rows(
        min_row=1,
        min_col=1,
        max_row=ws.max_row,
        max_col=ws.max_column,
        values_only=True,
    )
    return Grid.from_rows(rows)


def _csv_grid(path: Path) -> Grid:
    frame = pd.read_csv(
        path,
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
    )
    return Grid.from_rows(frame.itertuples(index=False, name=None))


def read_workbook_grids(path: Path) -> Dict[str, Grid]:
    """Load every sheet of a workbook as a grid, keyed by sheet name in workbook order.

    Args:
        path: Path to the workbook (``.xlsx``/``.xlsm``) or a ``.csv`` file.

    Returns:
        Ordered mapping of sheet name to grid. CSV files yield one entry
        named after the file stem.

    Raises:
        FileNotFoundError: When the file does not exist.
        ValueError: When the file type is not supported.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source workbook not found: {path}")

    suffix = path.suffix.lower()
    logger.info("Reading workbook %s", path.name, extra={"path": str(path)})

    if suffix == ".csv":
        return {path.stem: _csv_grid(path)}
    if suffix not in _EXCEL_SUFFIXES:
        raise ValueError(f"unsupported workbook type: {path}")

    wb = load_workbook(path, data_only=True)
    try:
        grids = {ws.title: _sheet_grid(ws) for ws in wb.worksheets}
    finally:
        wb.close()

    logger.info(
        "Workbook loaded",
        extra={"sheets": list(grids.keys()), "rows": {k: g.row_count for k, g in grids.items()}},
    )
    return grids


def read_sheet_grid(path: Path, sheet: str) -> Grid:
    """Load a single named sheet."""

    grids = read_workbook_grids(path)
    if sheet not in grids:
        raise ValueError(f"sheet not found: {sheet} (available: {', '.join(grids)})")
    return grids[sheet]
