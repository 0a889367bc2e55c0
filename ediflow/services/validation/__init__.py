"""Validation service package."""

from .validator import JsonValidator, OutputCheck, ValidationReport, XmlValidator, validate_ingestion_outputs

__all__ = [
    "JsonValidator",
    "OutputCheck",
    "ValidationReport",
    "XmlValidator",
    "validate_ingestion_outputs",
]
