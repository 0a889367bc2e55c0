"""Table-region detection service package."""

from .ai_fallback import (
    GeminiRegionSuggester,
    NullRegionSuggester,
    RegionSuggester,
    SuggestedRegion,
    adopt_suggestions,
)
from .detector import (
    analyze_density,
    detect_table_regions,
    estimate_table_region,
    extract_table_data,
    find_header_candidates,
    merge_overlapping_regions,
)
from .models import DetectionResult, HeaderCandidate, RegionBounds, TableRegion

__all__ = [
    "DetectionResult",
    "GeminiRegionSuggester",
    "HeaderCandidate",
    "NullRegionSuggester",
    "RegionBounds",
    "RegionSuggester",
    "SuggestedRegion",
    "TableRegion",
    "adopt_suggestions",
    "analyze_density",
    "detect_table_regions",
    "estimate_table_region",
    "extract_table_data",
    "find_header_candidates",
    "merge_overlapping_regions",
]
