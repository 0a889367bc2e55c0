"""Rule-based table-region detector.

Scans a sheet grid for header rows by keyword density, grows each header into
a rectangular region using row/column data density, classifies the region and
merges duplicates found from neighbouring header candidates.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from ediflow_io.grid import CellValue, Grid, cell_str, is_blank

from .keywords import classify_header, merge_keywords
from .models import LOW_CONFIDENCE_THRESHOLD, DetectionResult, HeaderCandidate, TableRegion

LOGGER = logging.getLogger(__name__)

MIN_DATA_CELLS = 3
MIN_REGION_ROWS = 3
MIN_REGION_COLS = 2
MAX_SPARSE_RUN = 2

Density = Tuple[List[bool], List[bool]]


def _as_grid(grid: Grid | Sequence[Sequence[object]]) -> Grid:
    if isinstance(grid, Grid):
        return grid
    return Grid.from_rows(grid)


def _count_filled(cells: Iterable[CellValue]) -> int:
    return sum(1 for cell in cells if not is_blank(cell))


def analyze_density(grid: Grid, min_data_cells: int = MIN_DATA_CELLS) -> Density:
    """Flag rows and columns holding at least ``min_data_cells`` non-blank cells."""

    row_density = [_count_filled(row) >= min_data_cells for row in grid.rows]
    col_density = [
        _count_filled(grid.cell(r, c) for r in range(grid.row_count)) >= min_data_cells
        for c in range(grid.max_width)
    ]
    return row_density, col_density


def find_header_candidates(grid: Grid, keywords: Iterable[str] = ()) -> List[HeaderCandidate]:
    """Return rows containing at least one keyword, most confident first."""

    all_keywords = merge_keywords(keywords)
    total = len(all_keywords)
    candidates: List[HeaderCandidate] = []

    for index, row in enumerate(grid.rows):
        if not row:
            continue
        text_cells = [cell for cell in row if isinstance(cell, str)]
        matched = tuple(kw for kw in all_keywords if any(kw in cell for cell in text_cells))
        if not matched:
            continue
        non_empty = _count_filled(row)
        confidence = min(0.7 * len(matched) / total + (0.3 if non_empty >= 3 else 0.0), 1.0)
        candidates.append(HeaderCandidate(row_index=index, confidence=confidence, matched_keywords=matched))

    candidates.sort(key=lambda c: c.confidence, reverse=True)
    return candidates


def _column_bounds(header: Sequence[CellValue], col_density: List[bool]) -> Tuple[int, int] | None:
    filled = [i for i, cell in enumerate(header) if not is_blank(cell)]
    if not filled:
        return None
    start_col, end_col = filled[0], filled[-1]
    for col in range(start_col, min(end_col, len(col_density) - 1) + 1):
        if not col_density[col] and col > start_col + 2:
            end_col = col - 1
            break
    return start_col, end_col


def _row_bounds(header_row: int, row_density: List[bool]) -> Tuple[int, int]:
    start_row = 0
    for row in range(header_row - 1, -1, -1):
        if row_density[row]:
            start_row = row + 1
            break

    # Without a dense row below the header the region runs to the last row.
    end_row = len(row_density) - 1
    sparse_run = 0
    for row in range(header_row + 1, len(row_density)):
        if row_density[row]:
            sparse_run = 0
            end_row = row
            continue
        sparse_run += 1
        if sparse_run > MAX_SPARSE_RUN and end_row > header_row:
            break
    return start_row, end_row


def estimate_table_region(
    candidate: HeaderCandidate,
    grid: Grid,
    density: Density,
) -> TableRegion | None:
    """Grow a header candidate into a bounded, classified region.

    Returns ``None`` when the header row is empty or the region is smaller
    than 3 rows by 2 columns.
    """

    row_density, col_density = density
    header = grid.row(candidate.row_index)
    bounds = _column_bounds(header, col_density)
    if bounds is None:
        LOGGER.warning("Header candidate row %s has no filled cells", candidate.row_index)
        return None
    start_col, end_col = bounds
    start_row, end_row = _row_bounds(candidate.row_index, row_density)

    table_type = classify_header(" ".join(cell_str(cell) for cell in header))

    row_count = end_row - start_row + 1
    col_count = end_col - start_col + 1
    if row_count < MIN_REGION_ROWS or col_count < MIN_REGION_COLS:
        LOGGER.warning(
            "Rejected region at header row %s: %s rows x %s cols",
            candidate.row_index,
            row_count,
            col_count,
        )
        return None

    confidence = candidate.confidence
    if row_count >= 5 and col_count >= 3:
        confidence = min(confidence + 0.2, 1.0)
    if table_type != "unknown":
        confidence = min(confidence + 0.1, 1.0)

    return TableRegion(
        start_row=start_row,
        end_row=end_row,
        start_col=start_col,
        end_col=end_col,
        header_row=candidate.row_index,
        table_type=table_type,
        confidence=confidence,
        description=f"Detected {table_type} table",
    )


def _overlaps(current: TableRegion, other: TableRegion) -> bool:
    row_overlap = min(current.end_row, other.end_row) - max(current.start_row, other.start_row) + 1
    min_row_span = min(current.row_span, other.row_span)
    col_overlap = min(current.end_col, other.end_col) - max(current.start_col, other.start_col) + 1
    return row_overlap > 0 and min_row_span > 0 and row_overlap / min_row_span > 0.5 and col_overlap > 0


def merge_overlapping_regions(regions: Sequence[TableRegion]) -> List[TableRegion]:
    """Greedy single-pass de-duplication keeping the more confident region.

    Regions are visited in input order; a later region replaces the one kept
    so far only when strictly more confident.
    """

    merged: List[TableRegion] = []
    processed: set[int] = set()

    for i, region in enumerate(regions):
        if i in processed:
            continue
        current = region
        processed.add(i)
        for j in range(i + 1, len(regions)):
            if j in processed:
                continue
            other = regions[j]
            if _overlaps(current, other):
                if other.confidence > current.confidence:
                    current = other
                processed.add(j)
        merged.append(current)

    return merged


def detect_table_regions(
    grid: Grid | Sequence[Sequence[object]],
    sheet_name: str = "",
    keywords: Iterable[str] = (),
    *,
    min_data_cells: int = MIN_DATA_CELLS,
) -> DetectionResult:
    """Detect table regions on one sheet.

    Args:
        grid: Sheet snapshot (raw row sequences are normalized into a grid).
        sheet_name: Label used in log lines only.
        keywords: Domain keywords merged with the built-in set.
        min_data_cells: Non-blank cells needed for a row/column to count as dense.

    Returns:
        Merged regions, their mean confidence and whether AI assistance is advised.
    """

    grid = _as_grid(grid)
    if grid.is_empty:
        LOGGER.info("Sheet %s is empty", sheet_name)
        return DetectionResult.empty()

    density = analyze_density(grid, min_data_cells)
    candidates = find_header_candidates(grid, keywords)
    if not candidates:
        LOGGER.info("No header candidates on sheet %s", sheet_name)
        return DetectionResult.empty()

    regions = [r for r in (estimate_table_region(c, grid, density) for c in candidates) if r is not None]
    merged = merge_overlapping_regions(regions)

    confidence = sum(r.confidence for r in merged) / len(merged) if merged else 0.0
    needs_ai = confidence < LOW_CONFIDENCE_THRESHOLD or not merged

    LOGGER.debug(
        "Sheet %s: %s candidate(s), %s region(s), confidence %.2f",
        sheet_name,
        len(candidates),
        len(merged),
        confidence,
    )
    return DetectionResult(regions=merged, needs_ai=needs_ai, confidence=confidence)


def extract_table_data(grid: Grid | Sequence[Sequence[object]], region: TableRegion) -> List[List[CellValue]]:
    """Return the region's cells clipped to the grid bounds."""

    grid = _as_grid(grid)
    last_row = min(region.end_row, grid.row_count - 1)
    last_col = min(region.end_col, grid.max_width - 1)
    return [
        [grid.cell(r, c) for c in range(region.start_col, last_col + 1)]
        for r in range(region.start_row, last_row + 1)
    ]
