"""`ediflow_io` top-level package exports the grid and document IO helpers."""

# Module responsibilities:
# - Re-export the grid abstraction and workbook/JSON IO so consumers have a stable API surface.

from __future__ import annotations

from .excel_reader import read_sheet_grid, read_workbook_grids
from .grid import BLANK, CellValue, Grid, cell_str, is_blank, normalize_cell
from .json_writer import read_json_document, write_json_document

__all__ = [
    "BLANK",
    "CellValue",
    "Grid",
    "cell_str",
    "is_blank",
    "normalize_cell",
    "read_sheet_grid",
    "read_workbook_grids",
    "read_json_document",
    "write_json_document",
]

__version__ = "0.1.0"
