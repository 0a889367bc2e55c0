"""Field-mapping engine between application JSON and EDI-standard JSON."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from ediflow.core.errors import MappingError

from .coercion import apply_transformation, convert, evaluate_condition
from .models import FieldMapping, MappingConfig
from .paths import get_nested_value, set_nested_value

LOGGER = logging.getLogger(__name__)

PREFERRED_TABLE_TYPE = "mapping"


class MappingTableSource(Protocol):
    """Ingestion-derived mapping tables, as stored JSON documents."""

    def find_all_tables_for_message_type(self, message_type: str) -> List[Dict[str, Any]]:  # pragma: no cover - interface definition
        ...


class MappingConfigLookup(Protocol):
    """Per-application mapping configurations."""

    def find_by_application_and_message_type(self, app_id: str, message_type: str) -> Optional[MappingConfig]:  # pragma: no cover - interface definition
        ...


def _coerce_default(rule: FieldMapping) -> Any:
    value = rule.default_value
    if rule.data_type:
        try:
            value = convert(value, rule.data_type, rule.format)
        except (MappingError, ValueError):
            # A default that does not coerce is written as configured.
            pass
    return value


def _is_applicable(rule: FieldMapping, data: Mapping[str, Any]) -> bool:
    return not rule.condition or evaluate_condition(rule.condition, data)


def apply_mapping(data: Mapping[str, Any], rules: Iterable[FieldMapping]) -> Dict[str, Any]:
    """Map application data onto EDI-standard paths, rule by rule.

    Coercion and transformation failures are logged per field and keep the
    value as it was. A required field with neither a value nor a default is
    logged and left out.
    """

    result: Dict[str, Any] = {}
    for rule in rules:
        if not _is_applicable(rule, data):
            continue

        value = get_nested_value(data, rule.app_field)
        if value is not None:
            if rule.data_type:
                try:
                    value = convert(value, rule.data_type, rule.format)
                except (MappingError, ValueError) as exc:
                    LOGGER.warning("Type conversion failed for %s: %s", rule.app_field, exc)
            if rule.transformation:
                try:
                    value = apply_transformation(value, rule.transformation)
                except (MappingError, ValueError, TypeError) as exc:
                    LOGGER.warning("Transformation failed for %s: %s", rule.app_field, exc)
            set_nested_value(result, rule.edi_field, value)
        elif rule.required:
            if rule.has_default:
                set_nested_value(result, rule.edi_field, _coerce_default(rule))
            else:
                LOGGER.warning("Required field not found: %s", rule.app_field)
    return result


def apply_reverse_mapping(data: Mapping[str, Any], rules: Iterable[FieldMapping]) -> Dict[str, Any]:
    """Map EDI-standard data back onto application paths.

    Only transformations run on the way back; data types describe the
    outbound direction.
    """

    result: Dict[str, Any] = {}
    for rule in rules:
        if not _is_applicable(rule, data):
            continue

        value = get_nested_value(data, rule.edi_field)
        if value is not None:
            if rule.transformation:
                try:
                    value = apply_transformation(value, rule.transformation)
                except (MappingError, ValueError, TypeError) as exc:
                    LOGGER.warning("Transformation failed for %s: %s", rule.edi_field, exc)
            set_nested_value(result, rule.app_field, value)
        elif rule.required and rule.has_default:
            set_nested_value(result, rule.app_field, _coerce_default(rule))
    return result


def rules_from_table(table: Mapping[str, Any]) -> List[FieldMapping]:
    """Plain rules (paths, id and required flag) from an ingested mapping table."""

    return [
        FieldMapping(
            app_field=field["appField"],
            edi_field=field["ediField"],
            edi_id=field.get("ediId"),
            required=bool(field.get("required", False)),
        )
        for field in table.get("fields", [])
        if field.get("appField") and field.get("ediField")
    ]


def select_mapping_table(tables: Sequence[Mapping[str, Any]]) -> Mapping[str, Any] | None:
    for table in tables:
        if table.get("tableType") == PREFERRED_TABLE_TYPE:
            return table
    return tables[0] if tables else None


class Mapper:
    """Resolve mapping rules and apply them in either direction.

    Args:
        table_source: Ingested mapping tables used when no configuration applies.
        config_store: Per-application configurations consulted when an
            ``app_id`` is given.
    """

    def __init__(
        self,
        table_source: MappingTableSource | None = None,
        config_store: MappingConfigLookup | None = None,
    ) -> None:
        self._tables = table_source
        self._configs = config_store

    def resolve_field_mappings(self, message_type: str, app_id: str | None = None) -> List[FieldMapping] | None:
        """Rules for ``message_type``: the application's config first, then the ingested table."""

        if app_id and self._configs is not None:
            config = self._configs.find_by_application_and_message_type(app_id, message_type)
            if config is not None:
                return list(config.field_mappings)
            LOGGER.info("No mapping config for app %s / %s, using default table", app_id, message_type)

        if self._tables is None:
            return None
        table = select_mapping_table(self._tables.find_all_tables_for_message_type(message_type))
        if table is None:
            return None
        return rules_from_table(table)

    def _rules(
        self,
        message_type: str,
        mapping_config: MappingConfig | None,
        app_id: str | None,
    ) -> List[FieldMapping] | None:
        if mapping_config is not None:
            return list(mapping_config.field_mappings)
        rules = self.resolve_field_mappings(message_type, app_id)
        if rules is None:
            LOGGER.warning("No mapping table found for message type: %s", message_type)
        return rules

    def map_to_edi_standard(
        self,
        app_data: Mapping[str, Any],
        message_type: str,
        mapping_config: MappingConfig | None = None,
        *,
        app_id: str | None = None,
    ) -> Dict[str, Any]:
        rules = self._rules(message_type, mapping_config, app_id)
        if rules is None:
            return dict(app_data)
        return apply_mapping(app_data, rules)

    def map_from_edi_standard(
        self,
        edi_data: Mapping[str, Any],
        message_type: str,
        mapping_config: MappingConfig | None = None,
        *,
        app_id: str | None = None,
    ) -> Dict[str, Any]:
        rules = self._rules(message_type, mapping_config, app_id)
        if rules is None:
            return dict(edi_data)
        return apply_reverse_mapping(edi_data, rules)


__all__ = [
    "Mapper",
    "MappingConfigLookup",
    "MappingTableSource",
    "apply_mapping",
    "apply_reverse_mapping",
    "rules_from_table",
    "select_mapping_table",
]
