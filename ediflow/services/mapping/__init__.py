"""Field-mapping engine service package."""

from .coercion import apply_transformation, convert, evaluate_condition
from .mapper import Mapper, MappingConfigLookup, MappingTableSource, apply_mapping, apply_reverse_mapping
from .models import FieldMapping, MappingConfig
from .paths import get_nested_value, set_nested_value

__all__ = [
    "FieldMapping",
    "Mapper",
    "MappingConfig",
    "MappingConfigLookup",
    "MappingTableSource",
    "apply_mapping",
    "apply_reverse_mapping",
    "apply_transformation",
    "convert",
    "evaluate_condition",
    "get_nested_value",
    "set_nested_value",
]
