"""Unit tests for the YAML-backed mapping configuration store."""

from __future__ import annotations

from pathlib import Path

import pytest
from ruamel.yaml import YAML

from ediflow.services.mapping import FieldMapping
from ediflow_persist import MappingConfigStore, StoreNotFoundError, StoreValidationError

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "ediflow" / "config" / "mapping_configs"


@pytest.fixture()
def store(tmp_path: Path) -> MappingConfigStore:
    return MappingConfigStore(tmp_path / "configs")


def test_sample_configuration_loads() -> None:
    store = MappingConfigStore(SAMPLE_DIR)

    config = store.find_by_id("sample-app-order")

    assert config is not None
    assert config.app_id == "sample-app"
    assert config.app_name == "Sample Ordering App"
    assert [m.app_field for m in config.field_mappings][:3] == ["orderNumber", "orderDate", "totalAmount"]
    currency = config.field_mappings[3]
    assert currency.has_default and currency.default_value == "JPY"
    assert not config.field_mappings[0].has_default
    assert store.find_application("sample-app").is_active


def test_create_writes_application_file(store: MappingConfigStore) -> None:
    config = store.create(
        "shop",
        "Shop",
        "order",
        [
            FieldMapping(app_field="no", edi_field="header.orderNumber", required=True),
            {"appField": "ccy", "ediField": "header.currency", "defaultValue": "JPY", "dataType": "string"},
        ],
    )

    path = store.config_dir / "shop.yaml"
    assert path.exists()
    assert not path.with_suffix(".yaml.lock").exists()
    raw = YAML(typ="safe").load(path.read_text(encoding="utf-8"))
    assert raw["app_id"] == "shop"
    assert raw["configs"][0]["message_type"] == "order"
    assert raw["configs"][0]["field_mappings"][1]["default_value"] == "JPY"

    reloaded = store.find_by_application_and_message_type("shop", "order")
    assert reloaded is not None
    assert reloaded.id == config.id
    assert reloaded.field_mappings[1].has_default
    assert reloaded.created_at is not None


def test_one_config_per_application_and_message_type(store: MappingConfigStore) -> None:
    store.create("shop", "Shop", "order", [])

    with pytest.raises(StoreValidationError, match="already exists"):
        store.create("shop", "Shop", "order", [])

    store.create("shop", "", "invoice", [])
    assert {c.message_type for c in store.find_by_application("shop")} == {"order", "invoice"}
    assert store.find_application("shop").name == "Shop"


def test_create_rejects_invalid_rules(store: MappingConfigStore) -> None:
    with pytest.raises(StoreValidationError):
        store.create("shop", "Shop", "order", [{"appField": "a", "ediField": "b", "dataType": "money"}])


def test_update_keeps_unchanged_fields(store: MappingConfigStore) -> None:
    config = store.create("shop", "Shop", "order", [{"appField": "a", "ediField": "b"}])

    updated = store.update(config.id, format_type="xml")

    assert updated.format_type == "xml"
    assert updated.field_mappings == config.field_mappings
    assert not updated.field_mappings[0].has_default
    assert store.find_by_id(config.id).format_type == "xml"


def test_update_errors(store: MappingConfigStore) -> None:
    config = store.create("shop", "Shop", "order", [])

    with pytest.raises(StoreNotFoundError):
        store.update("missing", format_type="xml")
    with pytest.raises(StoreValidationError):
        store.update(config.id, format_type="edifact")


def test_delete_and_save(store: MappingConfigStore) -> None:
    config = store.create("shop", "Shop", "order", [])

    assert store.delete(config.id)
    assert not store.delete(config.id)
    assert store.find_by_application("shop") == []

    saved = store.save(config.model_copy(update={"message_type": "invoice"}))
    assert store.find_by_id(config.id).message_type == "invoice"
    assert saved.updated_at is not None


def test_unreadable_files_are_skipped(store: MappingConfigStore) -> None:
    store.init_store()
    (store.config_dir / "broken.yaml").write_text("app_id: [unclosed", encoding="utf-8")
    (store.config_dir / "anonymous.yaml").write_text("configs: []\n", encoding="utf-8")
    (store.config_dir / "inactive.yaml").write_text("app_id: legacy\nactive: false\nconfigs: []\n", encoding="utf-8")

    assert [a.id for a in store.list_applications()] == ["legacy"]
    assert store.find_application("legacy").is_active is False
    assert store.find_application("ghost") is None


def test_healthcheck_counts_configs(store: MappingConfigStore) -> None:
    assert not store.healthcheck().is_healthy()

    store.create("shop", "Shop", "order", [])
    health = store.healthcheck()

    assert health.is_healthy()
    assert health.record_counts == {"shop": 1}
