"""Mapping tables: application field to common EDI field correspondences."""

from __future__ import annotations

import logging
from typing import List

from ediflow_io.grid import Grid
from ediflow.services.detection import TableRegion, extract_table_data

from .columns import (
    MAPPING_FALLBACKS,
    MAPPING_ROLES,
    cell_text,
    column_index,
    find_data_type,
    find_description,
    is_blank_row,
    is_required_row,
    resolve_columns,
)
from .models import MappingField, MappingTable, RegionModel

LOGGER = logging.getLogger(__name__)


def extract_mapping_table(
    grid: Grid,
    region: TableRegion,
    sheet_name: str,
    message_type: str,
) -> MappingTable | None:
    """Collect one :class:`MappingField` per data row naming both fields."""

    data = extract_table_data(grid, region)
    header_offset = region.header_row - region.start_row
    if not data or header_offset < 0 or header_offset >= len(data):
        LOGGER.warning("Invalid header row %s for region %s", region.header_row, region.a1_range())
        return None

    columns = resolve_columns(data[header_offset], MAPPING_ROLES)
    app_idx = column_index(columns, "app_field", MAPPING_FALLBACKS)
    edi_idx = column_index(columns, "edi_field", MAPPING_FALLBACKS)
    id_idx = column_index(columns, "edi_id", MAPPING_FALLBACKS)

    fields: List[MappingField] = []
    for row in data[header_offset + 1 :]:
        if is_blank_row(row):
            continue
        app_field = cell_text(row, app_idx)
        edi_field = cell_text(row, edi_idx)
        if not app_field or not edi_field:
            continue
        fields.append(
            MappingField(
                app_field=app_field,
                edi_field=edi_field,
                edi_id=cell_text(row, id_idx),
                required=is_required_row(row),
                data_type=find_data_type(row),
                description=find_description(row),
            )
        )

    if not fields:
        return None

    return MappingTable(
        sheet_name=f"{sheet_name} ({region.table_type})",
        message_type=message_type,
        table_type=region.table_type,
        region=RegionModel.from_bounds(region.bounds()),
        fields=fields,
    )


__all__ = ["extract_mapping_table"]
