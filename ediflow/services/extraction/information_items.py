"""Information-item tables: one record per EDI data item of a message."""

from __future__ import annotations

import logging
from typing import List, Sequence

from ediflow_io.grid import CellValue, Grid
from ediflow.services.detection import TableRegion, extract_table_data

from .columns import (
    INFORMATION_ITEM_FALLBACKS,
    INFORMATION_ITEM_ROLES,
    cell_text,
    column_index,
    is_blank_row,
    resolve_columns,
)
from .models import CommonEdiMapping, InformationItem, InformationItemTable, ItemReference, RegionModel

LOGGER = logging.getLogger(__name__)

# Cover, revision-history and how-to sheets never carry item tables.
SKIPPED_SHEET_MARKERS = ("表紙", "改定履歴", "使い方")

_INDUSTRY_ROLES = ("common_core", "manufacturing", "construction", "distribution")
_OPTIONAL_ROLES = ("row_number", "header_detail", "cl_id", "item_definition", "repetition", "established_revised")


def should_skip_sheet(sheet_name: str) -> bool:
    return any(marker in sheet_name for marker in SKIPPED_SHEET_MARKERS)


def _build_item(row: Sequence[CellValue], columns: dict[str, int]) -> InformationItem | None:
    item_name = cell_text(row, column_index(columns, "item_name", INFORMATION_ITEM_FALLBACKS))
    if not item_name:
        return None

    values = {role: cell_text(row, columns[role]) for role in _OPTIONAL_ROLES}

    mapping = None
    if any(columns[role] >= 0 for role in _INDUSTRY_ROLES):
        mapping = CommonEdiMapping(**{role: cell_text(row, columns[role]) for role in _INDUSTRY_ROLES})

    reference = None
    if columns["invoice_compatible"] >= 0:
        reference = ItemReference(invoice_compatible=cell_text(row, columns["invoice_compatible"]))

    return InformationItem(item_name=item_name, common_edi_mapping=mapping, reference=reference, **values)


def extract_information_items(
    grid: Grid,
    region: TableRegion,
    sheet_name: str,
    message_type: str,
) -> InformationItemTable | None:
    """Turn a detected region into an information-item table.

    Rows after the header become items; rows without an item name are skipped.
    Returns ``None`` when the region yields no items.
    """

    data = extract_table_data(grid, region)
    header_offset = region.header_row - region.start_row
    if not data or header_offset < 0 or header_offset >= len(data):
        LOGGER.warning("Invalid header row %s for region %s", region.header_row, region.a1_range())
        return None

    columns = resolve_columns(data[header_offset], INFORMATION_ITEM_ROLES)
    items: List[InformationItem] = []
    for row in data[header_offset + 1 :]:
        if is_blank_row(row):
            continue
        item = _build_item(row, columns)
        if item is not None:
            items.append(item)

    if not items:
        return None

    return InformationItemTable(
        sheet_name=f"{sheet_name} ({region.table_type})",
        message_type=message_type,
        table_type=region.table_type,
        region=RegionModel.from_bounds(region.bounds()),
        items=items,
    )


__all__ = ["SKIPPED_SHEET_MARKERS", "extract_information_items", "should_skip_sheet"]
