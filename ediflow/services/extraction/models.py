"""Typed records written by the ingestion converters.

Field names serialize in camelCase so the JSON documents keep a stable,
diff-friendly shape across runs.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ediflow.services.detection.models import RegionBounds


class _Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RegionModel(_Document):
    start_row: int
    end_row: int
    start_col: int
    end_col: int

    @classmethod
    def from_bounds(cls, bounds: RegionBounds) -> "RegionModel":
        return cls(
            start_row=bounds.start_row,
            end_row=bounds.end_row,
            start_col=bounds.start_col,
            end_col=bounds.end_col,
        )


class CommonEdiMapping(_Document):
    common_core: Optional[str] = None
    manufacturing: Optional[str] = None
    construction: Optional[str] = None
    distribution: Optional[str] = None


class ItemReference(_Document):
    invoice_compatible: Optional[str] = None


class InformationItem(_Document):
    row_number: Optional[str] = None
    header_detail: Optional[str] = None
    cl_id: Optional[str] = None
    item_name: str
    item_definition: Optional[str] = None
    repetition: Optional[str] = None
    established_revised: Optional[str] = None
    common_edi_mapping: Optional[CommonEdiMapping] = None
    reference: Optional[ItemReference] = None


class InformationItemTable(_Document):
    sheet_name: str
    message_type: str
    table_type: Optional[str] = None
    region: Optional[RegionModel] = None
    items: List[InformationItem] = Field(default_factory=list)


class MappingField(_Document):
    app_field: str
    edi_field: str
    edi_id: Optional[str] = None
    required: bool = False
    data_type: Optional[str] = None
    description: Optional[str] = None


class MappingTable(_Document):
    sheet_name: str
    message_type: str
    table_type: Optional[str] = None
    region: Optional[RegionModel] = None
    fields: List[MappingField] = Field(default_factory=list)


class CodeValue(_Document):
    code: str
    code_name: str
    code_name_en: Optional[str] = None
    description: Optional[str] = None
    international_code: Optional[str] = None
    international_code_name: Optional[str] = None
    category: Optional[str] = None


class CodeDefinition(_Document):
    code_type: str
    sheet_name: str
    table_type: Optional[str] = None
    region: Optional[RegionModel] = None
    codes: List[CodeValue] = Field(default_factory=list)


__all__ = [
    "CodeDefinition",
    "CodeValue",
    "CommonEdiMapping",
    "InformationItem",
    "InformationItemTable",
    "ItemReference",
    "MappingField",
    "MappingTable",
    "RegionModel",
]
