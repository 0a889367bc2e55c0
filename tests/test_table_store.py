"""Unit tests for the ingestion-output table store."""

# Module responsibilities:
# - Validate grouping and preference rules for mapping, code and item lookups.
# - Assert unreadable documents are skipped instead of failing the load.

from __future__ import annotations

from pathlib import Path

import pytest

from ediflow_io import write_json_document
from ediflow_persist import TableStore


@pytest.fixture()
def data_root(tmp_path: Path) -> Path:
    mappings = tmp_path / "mappings"
    write_json_document(
        mappings / "order-code-definition-mapping.json",
        {"messageType": "order", "tableType": "code-definition", "fields": [{"appField": "c", "ediField": "d"}]},
    )
    write_json_document(
        mappings / "order-mapping-mapping.json",
        {"messageType": "order", "tableType": "mapping", "fields": [{"appField": "a", "ediField": "b"}]},
    )
    write_json_document(
        mappings / "invoice-unknown-mapping.json",
        {"messageType": "invoice", "tableType": "unknown", "fields": []},
    )
    write_json_document(mappings / "mappings.json", [{"messageType": "order"}])
    (mappings / "broken-mapping.json").write_text("{not json", encoding="utf-8")
    write_json_document(mappings / "partial-mapping.json", {"messageType": "order"})

    write_json_document(
        tmp_path / "code-definitions" / "unit.json",
        {
            "codeType": "unit",
            "tableType": "code-definition",
            "codes": [{"code": "EA", "codeName": "個"}, {"code": "KGM", "codeName": "キログラム"}],
        },
    )
    write_json_document(
        tmp_path / "information-items" / "order-unknown-info-items.json",
        {"messageType": "order", "tableType": "unknown", "items": [{"itemName": "発注番号"}]},
    )
    return tmp_path


def test_mapping_lookup_prefers_mapping_table(data_root: Path) -> None:
    store = TableStore(data_root)

    assert store.get_mapping("order")["tableType"] == "mapping"
    assert store.get_mapping("order", "code-definition")["fields"][0]["appField"] == "c"
    assert store.get_mapping("order", "cefact-bie") is None
    assert store.get_mapping("invoice")["tableType"] == "unknown"
    assert store.get_mapping("quotation") is None


def test_all_tables_for_message_type_skip_unreadable_documents(data_root: Path) -> None:
    store = TableStore(data_root)

    tables = store.find_all_tables_for_message_type("order")

    assert [t["tableType"] for t in tables] == ["code-definition", "mapping"]
    assert len(store.get_all_mappings()) == 3


def test_code_lookups(data_root: Path) -> None:
    store = TableStore(data_root)

    assert store.find_code_by_value("unit", "KGM") == {"code": "KGM", "codeName": "キログラム"}
    assert store.find_code_by_value("unit", "ZZZ") is None
    assert store.find_code_by_value("currency", "JPY") is None
    assert [d["codeType"] for d in store.get_all_code_definitions()] == ["unit"]


def test_information_item_lookups(data_root: Path) -> None:
    store = TableStore(data_root)

    assert store.get_information_items("order")["items"][0]["itemName"] == "発注番号"
    assert len(store.get_information_items_by_message_type("order")) == 1
    assert store.get_information_items("invoice") is None
    assert len(store.get_all_information_items()) == 1


def test_load_is_cached_until_forced(data_root: Path) -> None:
    store = TableStore(data_root)
    assert store.get_mapping("quotation") is None

    write_json_document(
        data_root / "mappings" / "quotation-mapping-mapping.json",
        {"messageType": "quotation", "tableType": "mapping", "fields": []},
    )

    assert store.get_mapping("quotation") is None
    store.load(force=True)
    assert store.get_mapping("quotation") is not None


def test_missing_root_yields_empty_store(tmp_path: Path) -> None:
    store = TableStore(tmp_path / "nothing-yet")

    assert store.get_all_mappings() == []
    assert not store.healthcheck().is_healthy()


def test_init_store_and_healthcheck(tmp_path: Path, data_root: Path) -> None:
    store = TableStore(data_root)

    assert store.init_store() == data_root.resolve()
    health = store.healthcheck()

    assert health.is_healthy()
    assert health.record_counts == {"mappings": 3, "code-definitions": 1, "information-items": 1}
