"""Column-role inference over a region's header row."""

from __future__ import annotations

import re
from typing import Dict, Mapping, Sequence

from ediflow_io.grid import CellValue, cell_str

ABSENT = -1

# Roles are matched by case-sensitive substring against header cells,
# Japanese label first, then the English variants.
INFORMATION_ITEM_ROLES: Mapping[str, Sequence[str]] = {
    "row_number": ("行番号", "Row"),
    "header_detail": ("ヘッダ", "明細", "Header", "Detail"),
    "cl_id": ("CL/ID", "CLID", "ID"),
    "item_name": ("項目名", "Item Name", "Name"),
    "item_definition": ("項目定義", "Definition", "定義"),
    "repetition": ("繰返し", "Repetition", "繰り返し"),
    "established_revised": ("制定", "改定", "Established", "Revised"),
    "common_core": ("中小共通コア", "Common Core"),
    "manufacturing": ("中小製造業", "Manufacturing"),
    "construction": ("中小建設業", "Construction"),
    "distribution": ("中小流通業", "Distribution"),
    "invoice_compatible": ("インボイス対応", "Invoice Compatible"),
}

MAPPING_ROLES: Mapping[str, Sequence[str]] = {
    "app_field": ("業務アプリ", "App Field", "Application"),
    "edi_field": ("共通EDI", "EDI Field"),
    "edi_id": ("識別子", "EDI ID", "CL/ID"),
}

CODE_DEFINITION_ROLES: Mapping[str, Sequence[str]] = {
    "code": ("コード", "Code"),
    "name": ("名称", "Name", "コード名"),
    "name_en": ("English", "英語"),
    "description": ("説明", "Description"),
    "international_code": ("国際", "International"),
    "category": ("分類", "Category"),
}

# Positional last resort when a required role has no matching header.
INFORMATION_ITEM_FALLBACKS: Mapping[str, int] = {"item_name": 3}
MAPPING_FALLBACKS: Mapping[str, int] = {"app_field": 0, "edi_field": 1, "edi_id": 2}
CODE_DEFINITION_FALLBACKS: Mapping[str, int] = {"code": 0, "name": 1}

REQUIRED_MARKERS = ("必須", "○", "●")
DATA_TYPE_PATTERN = re.compile(r"(String|Number|Date|Code|Identifier)")


def resolve_columns(header: Sequence[CellValue], roles: Mapping[str, Sequence[str]]) -> Dict[str, int]:
    """Map each role to the first header column containing one of its keywords."""

    labels = [cell_str(cell) for cell in header]
    resolved: Dict[str, int] = {}
    for role, keywords in roles.items():
        resolved[role] = next(
            (idx for idx, label in enumerate(labels) if any(kw in label for kw in keywords)),
            ABSENT,
        )
    return resolved


def column_index(columns: Mapping[str, int], role: str, fallbacks: Mapping[str, int]) -> int:
    index = columns.get(role, ABSENT)
    if index == ABSENT:
        return fallbacks.get(role, ABSENT)
    return index


def cell_text(row: Sequence[CellValue], index: int) -> str | None:
    """Trimmed cell text, ``None`` when the column is absent or out of range."""

    if index < 0 or index >= len(row):
        return None
    return cell_str(row[index]).strip()


def is_blank_row(row: Sequence[CellValue]) -> bool:
    return all(cell_str(cell).strip() == "" for cell in row)


def is_required_row(row: Sequence[CellValue]) -> bool:
    return any(marker in cell_str(cell) for cell in row for marker in REQUIRED_MARKERS)


def find_data_type(row: Sequence[CellValue]) -> str | None:
    for cell in row:
        text = cell_str(cell)
        if DATA_TYPE_PATTERN.search(text):
            return text.strip()
    return None


def find_description(row: Sequence[CellValue]) -> str | None:
    for cell in row:
        text = cell_str(cell)
        if len(text) > 10 and "○" not in text:
            return text.strip()
    return None
