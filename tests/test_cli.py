"""CLI integration tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ediflow import cli

from conftest import MAPPING_ROWS


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


pytestmark = pytest.mark.usefixtures("quiet_logger")


def test_detect_prints_regions(cli_runner: CliRunner, make_workbook) -> None:
    workbook = make_workbook("mapping.xlsx", {"注文マッピング": MAPPING_ROWS, "Blank": [["x"]]})

    result = cli_runner.invoke(cli.app, ["detect", str(workbook), "--sheet", "注文マッピング"])

    assert result.exit_code == 0, result.output
    assert "[注文マッピング] 1 region(s)" in result.output
    assert "R1C1:R8C4" in result.output
    assert "[Blank]" not in result.output


def test_detect_unknown_sheet_fails(cli_runner: CliRunner, make_workbook) -> None:
    workbook = make_workbook("mapping.xlsx", {"注文マッピング": MAPPING_ROWS})

    result = cli_runner.invoke(cli.app, ["detect", str(workbook), "--sheet", "Other"])

    assert result.exit_code == 1


def test_ingest_then_validate_outputs(cli_runner: CliRunner, make_workbook, tmp_path: Path) -> None:
    workbook = make_workbook("mapping.xlsx", {"注文マッピング": MAPPING_ROWS})
    data_dir = tmp_path / "data"

    result = cli_runner.invoke(
        cli.app,
        ["ingest", "mapping", "--workbook", str(workbook), "--data-dir", str(data_dir), "--no-ai"],
    )

    assert result.exit_code == 0, result.output
    assert "mapping: 1 table(s) from mapping.xlsx" in result.output
    assert (data_dir / "mappings" / "order-mapping-mapping.json").exists()

    check = cli_runner.invoke(cli.app, ["validate-outputs", "--data-dir", str(data_dir)])
    assert check.exit_code == 0, check.output
    assert "✓ mappings/order-mapping-mapping.json: 5 fields" in check.output
    assert "0 errors" in check.output


def test_ingest_rejects_unknown_kind(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli.app, ["ingest", "pricing", "--data-dir", str(tmp_path)])

    assert result.exit_code == 2


def test_validate_outputs_reports_errors(cli_runner: CliRunner, tmp_path: Path) -> None:
    (tmp_path / "mappings").mkdir()
    (tmp_path / "mappings" / "bad-mapping.json").write_text("[]", encoding="utf-8")

    result = cli_runner.invoke(cli.app, ["validate-outputs", "--data-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "✗ mappings/bad-mapping.json: invalid structure" in result.output


def test_map_with_application_config(cli_runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "order.json"
    source.write_text(json.dumps({"orderNumber": "PO-9", "totalAmount": "2,000"}), encoding="utf-8")
    target = tmp_path / "edi.json"

    result = cli_runner.invoke(
        cli.app,
        [
            "map",
            str(source),
            "--message-type",
            "order",
            "--app-id",
            "sample-app",
            "--data-dir",
            str(tmp_path / "data"),
            "--output",
            str(target),
        ],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text(encoding="utf-8")) == {
        "header": {"orderNumber": "PO-9", "totalAmount": 2000, "currency": "JPY"}
    }


def test_map_rejects_unknown_direction(cli_runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "order.json"
    source.write_text("{}", encoding="utf-8")

    result = cli_runner.invoke(cli.app, ["map", str(source), "-t", "order", "--direction", "sideways"])

    assert result.exit_code == 2


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("{not json", "cannot read"),
        ('[{"orderNumber": "PO-1"}]', "must hold a JSON object, got list"),
    ],
)
def test_map_rejects_unusable_input(cli_runner: CliRunner, tmp_path: Path, content: str, message: str) -> None:
    source = tmp_path / "order.json"
    source.write_text(content, encoding="utf-8")

    result = cli_runner.invoke(cli.app, ["map", str(source), "-t", "order", "--data-dir", str(tmp_path / "data")])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert message in result.output


def test_to_xml_and_back(cli_runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "edi.json"
    source.write_text(json.dumps({"header": {"orderNumber": "PO-1"}}), encoding="utf-8")
    xml_path = tmp_path / "order.xml"
    json_path = tmp_path / "order.json"

    to_xml = cli_runner.invoke(cli.app, ["to-xml", str(source), "-t", "order", "-o", str(xml_path)])
    assert to_xml.exit_code == 0, to_xml.output
    assert "<SMEOrder" in xml_path.read_text(encoding="utf-8")

    back = cli_runner.invoke(cli.app, ["from-xml", str(xml_path), "-o", str(json_path)])
    assert back.exit_code == 0, back.output
    assert json.loads(json_path.read_text(encoding="utf-8")) == {"header": {"orderNumber": "PO-1"}}


def test_from_xml_rejects_malformed_input(cli_runner: CliRunner, tmp_path: Path) -> None:
    broken = tmp_path / "broken.xml"
    broken.write_text("<SMEOrder>", encoding="utf-8")

    result = cli_runner.invoke(cli.app, ["from-xml", str(broken)])

    assert result.exit_code == 1


def test_send_routes_through_provider(cli_runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "order.json"
    source.write_text(json.dumps({"orderNumber": "PO-5", "totalAmount": 10}), encoding="utf-8")

    result = cli_runner.invoke(
        cli.app,
        [
            "send",
            str(source),
            "-t",
            "order",
            "--sender",
            "sample-app",
            "--receiver",
            "buyer@esp-hub",
            "--data-dir",
            str(tmp_path / "data"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert '"status": "sent"' in result.output


def test_invalid_log_level(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli.app, ["--log-level", "LOUD", "validate-outputs", "--data-dir", str(tmp_path)])

    assert result.exit_code == 2
