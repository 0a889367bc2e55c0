"""Data models produced by the table-region detector."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Tuple

TableType = Literal[
    "information-items",
    "cefact-bie",
    "data-type-supplement",
    "mapping",
    "code-definition",
    "unknown",
]

TABLE_TYPES: Tuple[str, ...] = (
    "information-items",
    "cefact-bie",
    "data-type-supplement",
    "mapping",
    "code-definition",
    "unknown",
)

LOW_CONFIDENCE_THRESHOLD = 0.6


@dataclass(frozen=True, slots=True)
class RegionBounds:
    """Row/column bounds recorded alongside extracted documents."""

    start_row: int
    end_row: int
    start_col: int
    end_col: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "startRow": self.start_row,
            "endRow": self.end_row,
            "startCol": self.start_col,
            "endCol": self.end_col,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "RegionBounds":
        return cls(
            start_row=int(data["startRow"]),
            end_row=int(data["endRow"]),
            start_col=int(data["startCol"]),
            end_col=int(data["endCol"]),
        )


@dataclass(frozen=True, slots=True)
class HeaderCandidate:
    """A row that looks like a table header."""

    row_index: int
    confidence: float
    matched_keywords: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TableRegion:
    """A rectangular sub-range of a sheet believed to hold one logical table.

    Invariants: ``start_row <= header_row <= end_row``, ``start_col <= end_col``,
    at least 3 rows and 2 columns, ``0 <= confidence <= 1``.
    """

    start_row: int
    end_row: int
    start_col: int
    end_col: int
    header_row: int
    table_type: str
    confidence: float
    description: str | None = None

    @property
    def row_span(self) -> int:
        return self.end_row - self.start_row + 1

    @property
    def col_span(self) -> int:
        return self.end_col - self.start_col + 1

    def bounds(self) -> RegionBounds:
        return RegionBounds(self.start_row, self.end_row, self.start_col, self.end_col)

    def a1_range(self) -> str:
        """Human readable ``R1C1:R7C4`` label (1-based)."""

        return f"R{self.start_row + 1}C{self.start_col + 1}:R{self.end_row + 1}C{self.end_col + 1}"


@dataclass(slots=True)
class DetectionResult:
    """Aggregate of one sheet's detection pass."""

    regions: List[TableRegion] = field(default_factory=list)
    needs_ai: bool = True
    confidence: float = 0.0

    @classmethod
    def empty(cls) -> "DetectionResult":
        return cls(regions=[], needs_ai=True, confidence=0.0)

    def low_confidence_regions(self, threshold: float = LOW_CONFIDENCE_THRESHOLD) -> List[RegionBounds]:
        return [r.bounds() for r in self.regions if r.confidence < threshold]


__all__ = [
    "DetectionResult",
    "HeaderCandidate",
    "LOW_CONFIDENCE_THRESHOLD",
    "RegionBounds",
    "TABLE_TYPES",
    "TableRegion",
    "TableType",
]
