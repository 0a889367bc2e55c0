"""XML sanity checks, JSON Schema validation and ingestion-output checks.

RESPONSIBILITIES
----------------
* ``XmlValidator``: well-formedness plus a namespace check against the
  registered SME EDI schema files (no full XSD validation).
* ``JsonValidator``: Draft 7 JSON Schema validation with every error reported.
* ``validate_ingestion_outputs``: structural check of the documents written
  by the ingestion runner.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from lxml import etree

from ediflow.core.messages import ROOT_ELEMENTS, MessageType, schema_file_for
from ediflow.services.conversion import XmlConverter

LOGGER = logging.getLogger(__name__)

UNCEFACT_NAMESPACE = "urn:un:unece:uncefact"

XML_SCHEMA_FILES: Dict[str, str] = {mt.value: schema_file_for(mt) for mt in ROOT_ELEMENTS}
JSON_SCHEMA_FILES: Dict[str, str] = {
    MessageType.ORDER.value: "order.schema.json",
    MessageType.INVOICE.value: "invoice.schema.json",
}


@dataclass(slots=True)
class ValidationReport:
    """Outcome of one validation call."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    data: Optional[Any] = None


class XmlValidator:
    """Parse XML and check it against the registered schema names.

    Schemas are registered under the message type (``order``) and under
    their root element name (``SMEOrder``). The check is a namespace
    sanity check only.
    """

    def __init__(self, schema_dir: Path | None = None, converter: XmlConverter | None = None) -> None:
        self._schemas: Dict[str, Path] = {}
        self._converter = converter or XmlConverter()
        if schema_dir is not None:
            self.load_all_schemas(Path(schema_dir))

    def load_all_schemas(self, schema_dir: Path) -> None:
        if not schema_dir.exists():
            LOGGER.warning("XML schemas directory not found: %s", schema_dir)
            return
        for message_type, file_name in XML_SCHEMA_FILES.items():
            path = schema_dir / file_name
            if not path.exists():
                LOGGER.warning("XML schema file not found: %s", path)
                continue
            self.load_schema(message_type, path)

    def load_schema(self, schema_name: str, schema_path: Path) -> None:
        schema_path = Path(schema_path)
        self._schemas[schema_name] = schema_path
        self._schemas[schema_path.stem] = schema_path
        LOGGER.info("Loaded XML schema: %s (%s)", schema_name, schema_path.name)

    @property
    def loaded_schemas(self) -> List[str]:
        return sorted(self._schemas)

    def validate_xml(self, text: str, schema_name: str | None = None) -> ValidationReport:
        errors: List[str] = []
        try:
            etree.fromstring(text.encode("utf-8"), parser=etree.XMLParser(resolve_entities=False, no_network=True))
        except etree.XMLSyntaxError as exc:
            return ValidationReport(valid=False, errors=[f"XML parsing error: {exc}"])

        data = self._converter.xml_to_json(text)
        if schema_name and schema_name in self._schemas:
            if UNCEFACT_NAMESPACE not in text:
                errors.append("XML namespace may not match SME Common EDI standard")
        elif schema_name:
            errors.append(f"XML schema not loaded: {schema_name}")
            LOGGER.warning("Schema %s not found. XML validation may be incomplete.", schema_name)

        return ValidationReport(valid=not errors, errors=errors, data=data)

    def is_valid_xml(self, text: str) -> bool:
        try:
            etree.fromstring(text.encode("utf-8"), parser=etree.XMLParser(resolve_entities=False, no_network=True))
        except etree.XMLSyntaxError:
            return False
        return True


class JsonValidator:
    """Validate payloads against Draft 7 JSON Schemas registered by name."""

    def __init__(self, schema_dir: Path | None = None) -> None:
        self._validators: Dict[str, Draft7Validator] = {}
        if schema_dir is not None:
            self.load_all_schemas(Path(schema_dir))

    def load_all_schemas(self, schema_dir: Path) -> None:
        if not schema_dir.exists():
            LOGGER.warning("JSON schemas directory not found: %s", schema_dir)
            return
        for schema_name, file_name in JSON_SCHEMA_FILES.items():
            path = schema_dir / file_name
            if not path.exists():
                LOGGER.warning("JSON schema file not found: %s", path)
                continue
            with path.open("r", encoding="utf-8") as fh:
                self.add_schema(schema_name, json.load(fh))

    def add_schema(self, schema_name: str, schema: Mapping[str, Any]) -> None:
        try:
            Draft7Validator.check_schema(schema)
        except SchemaError as exc:
            LOGGER.error("Invalid JSON schema %s: %s", schema_name, exc.message)
            return
        self._validators[schema_name] = Draft7Validator(schema)
        LOGGER.info("Loaded JSON schema: %s", schema_name)

    @property
    def loaded_schemas(self) -> List[str]:
        return sorted(self._validators)

    def validate_json(self, data: Any, schema_name: str) -> ValidationReport:
        validator = self._validators.get(schema_name)
        if validator is None:
            return ValidationReport(valid=False, errors=[f"Schema not found: {schema_name}"])
        errors = [
            f"/{'/'.join(str(p) for p in err.path)}: {err.message}"
            for err in sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.path)))
        ]
        return ValidationReport(valid=not errors, errors=errors, data=data)


# Folder -> (aggregate file, identifying key, list key)
_OUTPUT_LAYOUT = {
    "mappings": ("mappings.json", "messageType", "fields"),
    "code-definitions": ("code-definitions.json", "codeType", "codes"),
    "information-items": ("information-items.json", "messageType", "items"),
}


@dataclass(slots=True)
class OutputCheck:
    """Per-file result lines and the total error count."""

    error_count: int = 0
    lines: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error_count == 0


def validate_ingestion_outputs(data_dir: Path) -> OutputCheck:
    """Check every per-table document under ``data_dir`` for its required keys."""

    check = OutputCheck()
    for folder, (aggregate, id_key, list_key) in _OUTPUT_LAYOUT.items():
        directory = Path(data_dir) / folder
        if not directory.exists():
            continue
        for path in sorted(directory.glob("*.json")):
            if path.name == aggregate:
                continue
            try:
                with path.open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except (OSError, json.JSONDecodeError) as exc:
                check.error_count += 1
                check.lines.append(f"✗ {folder}/{path.name}: {exc}")
                continue
            if not isinstance(data, dict) or not data.get(id_key) or not isinstance(data.get(list_key), list):
                check.error_count += 1
                check.lines.append(f"✗ {folder}/{path.name}: invalid structure")
                continue
            check.lines.append(f"✓ {folder}/{path.name}: {len(data[list_key])} {list_key}")
    return check


__all__ = [
    "JsonValidator",
    "OutputCheck",
    "ValidationReport",
    "XmlValidator",
    "validate_ingestion_outputs",
]
