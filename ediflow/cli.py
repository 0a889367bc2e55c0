"""Typer based command line entry points for EdiFlow."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import typer

from ediflow.core.errors import EdiFlowError
from ediflow.core.logger import get_logger, set_level
from ediflow.core.settings import Settings, load_settings, resolve_config_path
from ediflow.services.conversion import XmlConverter
from ediflow.services.detection import GeminiRegionSuggester, NullRegionSuggester, detect_table_regions
from ediflow.services.extraction import INGESTION_KINDS, IngestionRunner
from ediflow.services.mapping import Mapper
from ediflow.services.messaging import MessagePipeline, MessageRouter
from ediflow.services.validation import JsonValidator, XmlValidator, validate_ingestion_outputs
from ediflow_io import read_json_document, read_workbook_grids, write_json_document
from ediflow_persist import MappingConfigStore, StoreError, TableStore

KIND_ALIASES = {
    "information-items": "information_items",
    "mapping": "mapping",
    "code-definitions": "code_definitions",
}
DIRECTIONS = {"to-edi", "from-edi"}

app = typer.Typer(help="Utility CLI for EdiFlow services.")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    get_logger()
    try:
        set_level(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _settings(settings_path: Optional[Path]) -> Settings:
    try:
        return load_settings(settings_path)
    except EdiFlowError as exc:
        _fail(str(exc))


def _emit(payload: Any, output: Optional[Path]) -> None:
    if output is not None:
        if isinstance(payload, str):
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(payload, encoding="utf-8")
        else:
            write_json_document(output, payload)
        typer.echo(f"Wrote {output}")
        return
    typer.echo(payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, indent=2))


def _read_message(path: Path) -> Dict[str, Any]:
    try:
        payload = read_json_document(path)
    except (OSError, ValueError) as exc:
        _fail(f"cannot read {path}: {exc}")
    if not isinstance(payload, dict):
        _fail(f"{path} must hold a JSON object, got {type(payload).__name__}")
    return payload


def _mapper(settings: Settings, data_dir: Optional[Path]) -> Mapper:
    return Mapper(
        table_source=TableStore(data_dir or settings.data_dir),
        config_store=MappingConfigStore(settings.mapping_config_dir),
    )


@app.command("detect")
def detect(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, help="Excel workbook or CSV file."),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Only scan this sheet."),
    keyword: List[str] = typer.Option([], "--keyword", "-k", help="Extra header keyword (repeatable)."),
    min_data_cells: int = typer.Option(3, "--min-data-cells", min=1, help="Cells needed for a dense row/column."),
) -> None:
    """Print the table regions found on each sheet."""

    try:
        grids = read_workbook_grids(workbook)
    except (OSError, ValueError) as exc:
        _fail(str(exc))
    if sheet is not None:
        if sheet not in grids:
            _fail(f"sheet not found: {sheet} (available: {', '.join(grids)})")
        grids = {sheet: grids[sheet]}

    for name, grid in grids.items():
        result = detect_table_regions(grid, name, keyword, min_data_cells=min_data_cells)
        flag = " (AI fallback advised)" if result.needs_ai else ""
        typer.echo(f"[{name}] {len(result.regions)} region(s), confidence {result.confidence:.2f}{flag}")
        for region in result.regions:
            typer.echo(
                f"  {region.a1_range():<20} header row {region.header_row + 1:<4} "
                f"{region.table_type:<22} {region.confidence:.2f}"
            )


@app.command("ingest")
def ingest(
    kind: str = typer.Argument(..., help="information-items | mapping | code-definitions | all"),
    workbook: Optional[Path] = typer.Option(None, "--workbook", "-w", help="Workbook path (defaults to settings)."),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Output root for the JSON documents."),
    ai: Optional[bool] = typer.Option(None, "--ai/--no-ai", help="Ask Gemini about low-confidence sheets."),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Alternate settings.yaml."),
) -> None:
    """Convert EDI standard workbooks into JSON documents."""

    settings = _settings(settings_path)
    use_ai = settings.detection.ai_fallback if ai is None else ai
    runner = IngestionRunner(
        data_dir or settings.data_dir,
        keywords={k: settings.detection.keywords_for(k) for k in INGESTION_KINDS},
        suggester=GeminiRegionSuggester() if use_ai else NullRegionSuggester(),
        min_data_cells=settings.detection.min_data_cells,
    )

    if kind == "all":
        if workbook is not None:
            raise typer.BadParameter("--workbook cannot be combined with 'all'")
        workbooks = {k: resolve_config_path(v) for k, v in settings.workbooks.items()}
        try:
            reports = runner.run_all(workbooks)
        except (EdiFlowError, OSError, ValueError) as exc:
            _fail(str(exc))
    else:
        internal = KIND_ALIASES.get(kind)
        if internal is None:
            raise typer.BadParameter(f"kind must be one of {', '.join(KIND_ALIASES)} or all")
        path = workbook or (resolve_config_path(settings.workbooks[internal]) if internal in settings.workbooks else None)
        if path is None:
            raise typer.BadParameter(f"no workbook configured for {kind}; pass --workbook")
        try:
            reports = [runner.run(internal, path)]
        except (EdiFlowError, OSError, ValueError) as exc:
            _fail(str(exc))

    for report in reports:
        typer.echo(
            f"{report.kind}: {report.table_count} table(s) from {report.workbook.name}, "
            f"{len(report.skipped_sheets)} sheet(s) skipped -> {report.aggregate_path}"
        )


@app.command("validate-outputs")
def validate_outputs(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Root holding the ingestion output."),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Alternate settings.yaml."),
) -> None:
    """Check the structure of every generated JSON document."""

    root = data_dir or _settings(settings_path).data_dir
    check = validate_ingestion_outputs(root)
    for line in check.lines:
        typer.echo(line)
    typer.echo(f"=== Validation Complete: {check.error_count} errors ===")
    if not check.ok:
        raise typer.Exit(code=1)


@app.command("map")
def map_message(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON message to map."),
    message_type: str = typer.Option(..., "--message-type", "-t", help="order, invoice, ..."),
    direction: str = typer.Option("to-edi", "--direction", help="to-edi | from-edi"),
    app_id: Optional[str] = typer.Option(None, "--app-id", help="Use this application's mapping config."),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Root holding the ingestion output."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result here."),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Alternate settings.yaml."),
) -> None:
    """Map a JSON message between application and EDI-standard shapes."""

    if direction not in DIRECTIONS:
        raise typer.BadParameter("direction must be to-edi or from-edi")
    settings = _settings(settings_path)
    mapper = _mapper(settings, data_dir)
    data = _read_message(input_path)
    if direction == "to-edi":
        result = mapper.map_to_edi_standard(data, message_type, app_id=app_id)
    else:
        result = mapper.map_from_edi_standard(data, message_type, app_id=app_id)
    _emit(result, output)


@app.command("to-xml")
def to_xml(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="EDI-standard JSON."),
    message_type: str = typer.Option(..., "--message-type", "-t", help="order, invoice, ..."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the XML here."),
) -> None:
    """Serialize EDI-standard JSON as namespaced XML."""

    try:
        xml = XmlConverter().json_to_xml(_read_message(input_path), message_type)
    except EdiFlowError as exc:
        _fail(str(exc))
    _emit(xml, output)


@app.command("from-xml")
def from_xml(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="EDI XML message."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the JSON here."),
) -> None:
    """Parse an EDI XML message into JSON."""

    try:
        data = XmlConverter().xml_to_json(input_path.read_bytes())
    except EdiFlowError as exc:
        _fail(str(exc))
    _emit(data, output)


@app.command("send")
def send(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Application JSON message."),
    message_type: str = typer.Option(..., "--message-type", "-t", help="order, invoice, ..."),
    sender: str = typer.Option(..., "--sender", help="Sending application id."),
    receiver: str = typer.Option(..., "--receiver", help="receiver or receiver@provider."),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Root holding the ingestion output."),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Alternate settings.yaml."),
) -> None:
    """Run the outbound pipeline: map, convert, validate and route."""

    settings = _settings(settings_path)
    configs = MappingConfigStore(settings.mapping_config_dir)
    schema_dir = settings.schema_dir
    pipeline = MessagePipeline(
        Mapper(table_source=TableStore(data_dir or settings.data_dir), config_store=configs),
        xml_validator=XmlValidator(schema_dir / "xml"),
        json_validator=JsonValidator(schema_dir / "json"),
        router=MessageRouter(applications=configs),
    )
    try:
        message = pipeline.process_outbound(_read_message(input_path), message_type, sender, receiver)
    except (EdiFlowError, StoreError, ValueError) as exc:
        _fail(str(exc))
    typer.echo(json.dumps(message.summary(), ensure_ascii=False, indent=2))
    if message.error_message:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
