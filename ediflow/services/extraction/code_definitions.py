"""Code-definition tables: code lists with names and international equivalents."""

from __future__ import annotations

import logging
import re
from typing import List

from ediflow_io.grid import Grid
from ediflow.services.detection import TableRegion, extract_table_data

from .columns import (
    CODE_DEFINITION_FALLBACKS,
    CODE_DEFINITION_ROLES,
    cell_text,
    column_index,
    is_blank_row,
    resolve_columns,
)
from .models import CodeDefinition, CodeValue, RegionModel

LOGGER = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")


def safe_code_type(name: str) -> str:
    """Make a sheet name usable as a code type and file stem.

    >>> safe_code_type(" 単位 / コード ")
    '単位-コード'
    """

    cleaned = _UNSAFE_CHARS.sub("", name)
    cleaned = _WHITESPACE.sub("-", cleaned)
    cleaned = _HYPHEN_RUN.sub("-", cleaned)
    return cleaned.strip("-")


def code_type_for(sheet_name: str, region: TableRegion, index: int, table_count: int) -> str:
    base = safe_code_type(sheet_name)
    if not base:
        return f"{region.table_type}-table-{index}"
    if table_count > 1:
        return f"{base}-{region.table_type}-{index}"
    return f"{base}-{region.table_type}"


def extract_code_definition(
    grid: Grid,
    region: TableRegion,
    sheet_name: str,
    code_type: str,
) -> CodeDefinition | None:
    """Build a code list; rows missing either a code or a name are dropped."""

    data = extract_table_data(grid, region)
    header_offset = region.header_row - region.start_row
    if not data or header_offset < 0 or header_offset >= len(data):
        LOGGER.warning("Invalid header row %s for region %s", region.header_row, region.a1_range())
        return None

    columns = resolve_columns(data[header_offset], CODE_DEFINITION_ROLES)
    code_idx = column_index(columns, "code", CODE_DEFINITION_FALLBACKS)
    name_idx = column_index(columns, "name", CODE_DEFINITION_FALLBACKS)
    intl_idx = columns["international_code"]

    codes: List[CodeValue] = []
    for row in data[header_offset + 1 :]:
        if is_blank_row(row):
            continue
        code = cell_text(row, code_idx)
        name = cell_text(row, name_idx)
        if not code or not name:
            continue
        # The international code name sits right of the code column.
        intl_name = cell_text(row, intl_idx + 1) if intl_idx >= 0 else None
        codes.append(
            CodeValue(
                code=code,
                code_name=name,
                code_name_en=cell_text(row, columns["name_en"]),
                description=cell_text(row, columns["description"]),
                international_code=cell_text(row, intl_idx),
                international_code_name=intl_name or None,
                category=cell_text(row, columns["category"]),
            )
        )

    if not codes:
        return None

    return CodeDefinition(
        code_type=code_type,
        sheet_name=f"{sheet_name} ({region.table_type})",
        table_type=region.table_type,
        region=RegionModel.from_bounds(region.bounds()),
        codes=codes,
    )


__all__ = ["code_type_for", "extract_code_definition", "safe_code_type"]
