"""Mapping rule and per-application mapping configuration models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataType = Literal["string", "number", "date", "datetime", "boolean", "code"]
FormatType = Literal["json", "xml", "csv"]


class FieldMapping(BaseModel):
    """One source-path to destination-path directive.

    ``app_field`` and ``edi_field`` are dot-delimited paths into nested
    objects. A default only counts as present when it was supplied, so an
    explicit ``defaultValue: null`` is still written for required fields.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    app_field: str
    edi_field: str
    edi_id: Optional[str] = None
    required: bool = False
    default_value: Any = None
    data_type: Optional[DataType] = None
    transformation: Optional[str] = None
    condition: Optional[str] = None
    format: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return "default_value" in self.model_fields_set


class MappingConfig(BaseModel):
    """Ordered mapping rules owned by one application for one message type."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    app_id: str
    app_name: str = ""
    message_type: str
    field_mappings: List[FieldMapping] = Field(default_factory=list)
    format_type: FormatType = "json"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


__all__ = ["DataType", "FieldMapping", "FormatType", "MappingConfig"]
