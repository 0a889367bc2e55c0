"""Typed table extraction from detected spreadsheet regions."""

from .code_definitions import code_type_for, extract_code_definition, safe_code_type
from .columns import cell_text, resolve_columns
from .information_items import extract_information_items
from .mapping_tables import extract_mapping_table
from .models import (
    CodeDefinition,
    CodeValue,
    InformationItem,
    InformationItemTable,
    MappingField,
    MappingTable,
)
from .runner import INGESTION_KINDS, IngestionReport, IngestionRunner, infer_message_type

__all__ = [
    "CodeDefinition",
    "CodeValue",
    "INGESTION_KINDS",
    "InformationItem",
    "InformationItemTable",
    "IngestionReport",
    "IngestionRunner",
    "MappingField",
    "MappingTable",
    "cell_text",
    "code_type_for",
    "extract_code_definition",
    "extract_information_items",
    "extract_mapping_table",
    "infer_message_type",
    "resolve_columns",
    "safe_code_type",
]
