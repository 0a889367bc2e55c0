"""Workbook ingestion: detect regions per sheet, extract typed tables, write JSON.

RESPONSIBILITIES
----------------
* Drive the detector with kind-specific keywords for every sheet.
* Ask the optional region suggester when a sheet's detection is weak.
* Write one JSON document per extracted table plus an aggregate document.

PROCESS OVERVIEW
----------------
1. Read the workbook into grids (``ediflow_io``).
2. For each sheet: detect, consult the suggester, extract per region.
3. Clear stale documents of this kind and write the new ones.
4. Return an :class:`IngestionReport` describing what was produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ediflow_io import Grid, read_workbook_grids, write_json_document
from ediflow.core.errors import ExtractionError
from ediflow.services.detection import (
    NullRegionSuggester,
    RegionSuggester,
    TableRegion,
    adopt_suggestions,
    detect_table_regions,
)

from .code_definitions import code_type_for, extract_code_definition, safe_code_type
from .information_items import extract_information_items, should_skip_sheet
from .mapping_tables import extract_mapping_table

LOGGER = logging.getLogger(__name__)

INFORMATION_ITEMS = "information_items"
MAPPING = "mapping"
CODE_DEFINITIONS = "code_definitions"
INGESTION_KINDS = (INFORMATION_ITEMS, MAPPING, CODE_DEFINITIONS)

_BASE_MESSAGE_TYPES = (
    ("order", ("注文", "Order")),
    ("invoice", ("請求", "Invoice")),
    ("quotation", ("見積", "Quotation")),
)
_EXTENDED_MESSAGE_TYPES = _BASE_MESSAGE_TYPES + (
    ("shipment", ("出荷", "Shipment")),
    ("purchase", ("仕入", "Purchase")),
)


def infer_message_type(sheet_name: str, extended: bool = True) -> str:
    """Message type named by the sheet, else the lower-cased sheet name."""

    table = _EXTENDED_MESSAGE_TYPES if extended else _BASE_MESSAGE_TYPES
    for message_type, markers in table:
        if any(marker in sheet_name for marker in markers):
            return message_type
    return sheet_name.lower()


@dataclass(frozen=True, slots=True)
class IngestionKind:
    """Per-kind wiring: output folder, aggregate name and file suffix."""

    name: str
    subdir: str
    aggregate_name: str
    suffix: str


KINDS: Dict[str, IngestionKind] = {
    INFORMATION_ITEMS: IngestionKind(INFORMATION_ITEMS, "information-items", "information-items.json", "-info-items"),
    MAPPING: IngestionKind(MAPPING, "mappings", "mappings.json", "-mapping"),
    CODE_DEFINITIONS: IngestionKind(CODE_DEFINITIONS, "code-definitions", "code-definitions.json", ""),
}


@dataclass(slots=True)
class IngestionReport:
    """Summary of one ingestion run."""

    kind: str
    workbook: Path
    documents: List[Path] = field(default_factory=list)
    aggregate_path: Optional[Path] = None
    tables_per_sheet: Dict[str, int] = field(default_factory=dict)
    skipped_sheets: List[str] = field(default_factory=list)
    ai_requests: int = 0

    @property
    def table_count(self) -> int:
        return sum(self.tables_per_sheet.values())


@dataclass(slots=True)
class _Extracted:
    stem: str
    document: dict


class IngestionRunner:
    """Convert EDI standard workbooks into JSON documents under ``data_dir``.

    Args:
        data_dir: Output root; each kind writes into its own sub-folder.
        keywords: Extra detector keywords per ingestion kind.
        suggester: Region suggester consulted for weak detections.
        min_data_cells: Density threshold passed to the detector.
    """

    def __init__(
        self,
        data_dir: Path,
        *,
        keywords: Mapping[str, Sequence[str]] | None = None,
        suggester: RegionSuggester | None = None,
        min_data_cells: int = 3,
    ) -> None:
        self.data_dir = Path(data_dir)
        self._keywords = {k: list(v) for k, v in (keywords or {}).items()}
        self._suggester = suggester or NullRegionSuggester()
        self._min_data_cells = min_data_cells

    def output_dir(self, kind: str) -> Path:
        return self.data_dir / KINDS[kind].subdir

    def run(self, kind: str, workbook: Path) -> IngestionReport:
        """Ingest ``workbook`` as ``kind`` and write its documents."""

        if kind not in KINDS:
            raise ExtractionError(f"unknown ingestion kind: {kind} (expected one of {', '.join(INGESTION_KINDS)})")
        target = KINDS[kind]
        report = IngestionReport(kind=kind, workbook=Path(workbook))

        grids = read_workbook_grids(Path(workbook))
        LOGGER.info("Ingesting %s from %s (%s sheets)", kind, Path(workbook).name, len(grids))

        extracted: List[_Extracted] = []
        for sheet_name, grid in grids.items():
            if kind == INFORMATION_ITEMS and should_skip_sheet(sheet_name):
                LOGGER.info("Skipping sheet: %s", sheet_name)
                report.skipped_sheets.append(sheet_name)
                continue
            regions = self._detect(kind, sheet_name, grid, report)
            if not regions:
                LOGGER.warning("No tables detected in sheet: %s", sheet_name)
                report.skipped_sheets.append(sheet_name)
                continue
            tables = self._extract_sheet(kind, sheet_name, grid, regions)
            report.tables_per_sheet[sheet_name] = len(tables)
            extracted.extend(tables)

        self._write(target, extracted, report)
        LOGGER.info(
            "Ingested %s table(s) of %s into %s",
            report.table_count,
            kind,
            self.output_dir(kind),
        )
        return report

    def run_all(self, workbooks: Mapping[str, Path]) -> List[IngestionReport]:
        """Ingest every configured workbook; missing files are skipped with a warning."""

        reports: List[IngestionReport] = []
        for kind in INGESTION_KINDS:
            path = workbooks.get(kind)
            if path is None:
                continue
            if not Path(path).exists():
                LOGGER.warning("Workbook for %s not found: %s", kind, path)
                continue
            reports.append(self.run(kind, Path(path)))
        return reports

    def _detect(self, kind: str, sheet_name: str, grid: Grid, report: IngestionReport) -> List[TableRegion]:
        result = detect_table_regions(
            grid,
            sheet_name,
            self._keywords.get(kind, ()),
            min_data_cells=self._min_data_cells,
        )
        LOGGER.info(
            "Sheet %s: %s region(s), confidence %.2f",
            sheet_name,
            len(result.regions),
            result.confidence,
        )
        regions = list(result.regions)
        if not result.needs_ai:
            return regions

        hints = result.low_confidence_regions()
        if not hints:
            return regions
        report.ai_requests += 1
        suggestions = self._suggester.suggest_regions(sheet_name, hints)
        if suggestions:
            LOGGER.info("AI suggested %s region(s) for sheet %s", len(suggestions), sheet_name)
            regions = adopt_suggestions(regions, suggestions, grid.row_count, grid.max_width)
        return regions

    def _extract_sheet(
        self,
        kind: str,
        sheet_name: str,
        grid: Grid,
        regions: Sequence[TableRegion],
    ) -> List[_Extracted]:
        tables: List[_Extracted] = []
        for index, region in enumerate(regions):
            LOGGER.debug(
                "Region %s in %s: %s (%s)",
                index + 1,
                sheet_name,
                region.a1_range(),
                region.table_type,
            )
            if kind == INFORMATION_ITEMS:
                message_type = infer_message_type(sheet_name)
                table = extract_information_items(grid, region, sheet_name, message_type)
                stem = f"{message_type}-{region.table_type}"
            elif kind == MAPPING:
                # Only mapping regions name a message type; other tables keep the sheet name.
                message_type = (
                    infer_message_type(sheet_name, extended=False)
                    if region.table_type == "mapping"
                    else sheet_name.lower()
                )
                table = extract_mapping_table(grid, region, sheet_name, message_type)
                stem = f"{message_type}-{region.table_type}"
            else:
                code_type = code_type_for(sheet_name, region, index, len(regions))
                table = extract_code_definition(grid, region, sheet_name, code_type)
                stem = code_type

            if table is None:
                LOGGER.info("Region %s in %s produced no rows", region.a1_range(), sheet_name)
                continue
            tables.append(_Extracted(stem=stem, document=table.to_document()))
        return tables

    def _write(self, target: IngestionKind, extracted: Iterable[_Extracted], report: IngestionReport) -> None:
        out_dir = self.data_dir / target.subdir
        out_dir.mkdir(parents=True, exist_ok=True)
        for stale in out_dir.glob("*.json"):
            stale.unlink()

        used: Dict[str, int] = {}
        documents: List[dict] = []
        for item in extracted:
            stem = _unique_stem(safe_code_type(item.stem) or target.subdir, used)
            path = write_json_document(out_dir / f"{stem}{target.suffix}.json", item.document)
            report.documents.append(path)
            documents.append(item.document)

        report.aggregate_path = write_json_document(out_dir / target.aggregate_name, documents)


def _unique_stem(stem: str, used: Dict[str, int]) -> str:
    count = used.get(stem, 0)
    used[stem] = count + 1
    return stem if count == 0 else f"{stem}-{count}"


__all__ = [
    "CODE_DEFINITIONS",
    "INFORMATION_ITEMS",
    "INGESTION_KINDS",
    "IngestionReport",
    "IngestionRunner",
    "KINDS",
    "MAPPING",
    "infer_message_type",
]
