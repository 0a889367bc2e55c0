"""Optional AI-assisted region suggestions for low-confidence sheets.

The rule-based detector never depends on this module. When a detection pass
reports ``needs_ai`` the ingestion runner may ask a :class:`RegionSuggester`
for extra hints; every failure degrades to "no suggestions".
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, List, Protocol, Sequence

import requests
from requests.exceptions import RequestException

from .models import TABLE_TYPES, RegionBounds, TableRegion

LOGGER = logging.getLogger(__name__)

API_KEY_ENV = "GEMINI_API_KEY"
DEFAULT_MODEL = "gemini-pro"
DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class SuggestedRegion:
    """Best-effort region guess (0-based bounds)."""

    start_row: int
    end_row: int
    start_col: int
    end_col: int
    table_type: str = "unknown"
    description: str | None = None


class RegionSuggester(Protocol):
    """Narrow interface for external region hints."""

    def suggest_regions(self, sheet_name: str, hints: Sequence[RegionBounds]) -> List[SuggestedRegion]:  # pragma: no cover - interface definition
        ...


class NullRegionSuggester:
    """Suggester used when AI assistance is disabled."""

    def suggest_regions(self, sheet_name: str, hints: Sequence[RegionBounds]) -> List[SuggestedRegion]:
        return []


def build_prompt(sheet_name: str, hints: Sequence[RegionBounds]) -> str:
    lines = [
        f"領域{idx + 1}: 行{h.start_row + 1}-{h.end_row + 1}, 列{h.start_col + 1}-{h.end_col + 1}"
        for idx, h in enumerate(hints)
    ]
    return (
        "以下のExcelシートの特定領域について、テーブル構造を分析してください。\n\n"
        f"シート名: {sheet_name}\n"
        "確認領域:\n"
        + "\n".join(lines)
        + "\n\n各領域について、startRow, endRow, startCol, endCol（いずれも1始まり）、"
        f"tableType（{', '.join(TABLE_TYPES)} のいずれか）、description をJSON配列で返してください。"
    )


def _strip_fences(text: str) -> str:
    body = text.strip()
    if not body.startswith("```"):
        return body
    lines = body.split("\n")
    lines.pop(0)
    if lines and lines[-1].strip() == "```":
        lines.pop()
    return "\n".join(lines)


def _to_index(value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(number - 1, 0)


def parse_region_response(text: str) -> List[SuggestedRegion]:
    """Parse the model's JSON array answer into 0-based suggestions."""

    try:
        payload = json.loads(_strip_fences(text))
    except (json.JSONDecodeError, TypeError):
        LOGGER.warning("Could not parse region suggestions: %.200s", text)
        return []
    if not isinstance(payload, list):
        return []

    regions: List[SuggestedRegion] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        table_type = item.get("tableType") or "unknown"
        if table_type not in TABLE_TYPES:
            table_type = "unknown"
        regions.append(
            SuggestedRegion(
                start_row=_to_index(item.get("startRow")),
                end_row=_to_index(item.get("endRow")),
                start_col=_to_index(item.get("startCol")),
                end_col=_to_index(item.get("endCol")),
                table_type=table_type,
                description=item.get("description"),
            )
        )
    return regions


SUGGESTED_CONFIDENCE = 0.5


def _overlaps_any(candidate: SuggestedRegion, regions: Sequence[TableRegion]) -> bool:
    return any(
        candidate.start_row <= r.end_row
        and r.start_row <= candidate.end_row
        and candidate.start_col <= r.end_col
        and r.start_col <= candidate.end_col
        for r in regions
    )


def adopt_suggestions(
    regions: Sequence[TableRegion],
    suggestions: Sequence[SuggestedRegion],
    row_count: int,
    col_count: int,
) -> List[TableRegion]:
    """Append suggestions that cover cells no rule-based region touches.

    Suggestions outside the grid, smaller than 3 rows by 2 columns or
    overlapping an existing region are ignored. Adopted regions use their
    first row as header and a fixed confidence of 0.5.
    """

    adopted: List[TableRegion] = list(regions)
    for s in suggestions:
        if s.end_row >= row_count or s.end_col >= col_count:
            continue
        if s.end_row - s.start_row + 1 < 3 or s.end_col - s.start_col + 1 < 2:
            continue
        if _overlaps_any(s, adopted):
            continue
        adopted.append(
            TableRegion(
                start_row=s.start_row,
                end_row=s.end_row,
                start_col=s.start_col,
                end_col=s.end_col,
                header_row=s.start_row,
                table_type=s.table_type,
                confidence=SUGGESTED_CONFIDENCE,
                description=s.description or f"Suggested {s.table_type} table",
            )
        )
    return adopted


class GeminiRegionSuggester:
    """Ask the Gemini ``generateContent`` endpoint about low-confidence regions."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key or os.getenv(API_KEY_ENV)
        self._url = endpoint.format(model=model)
        self._timeout = timeout
        self._session = session or requests.Session()

    def suggest_regions(self, sheet_name: str, hints: Sequence[RegionBounds]) -> List[SuggestedRegion]:
        if not self._api_key:
            LOGGER.warning("%s not set. Skipping AI detection.", API_KEY_ENV)
            return []
        if not hints:
            return []

        body = {"contents": [{"parts": [{"text": build_prompt(sheet_name, hints)}]}]}
        try:
            response = self._session.post(
                self._url,
                params={"key": self._api_key},
                json=body,
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (RequestException, ValueError) as exc:
            LOGGER.warning("AI region detection failed for sheet %s: %s", sheet_name, exc)
            return []

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            LOGGER.warning("AI response for sheet %s had no text candidate", sheet_name)
            return []
        return parse_region_response(text)


__all__ = [
    "GeminiRegionSuggester",
    "SUGGESTED_CONFIDENCE",
    "NullRegionSuggester",
    "RegionSuggester",
    "SuggestedRegion",
    "adopt_suggestions",
    "build_prompt",
    "parse_region_response",
]
