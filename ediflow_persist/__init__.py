"""
Persistence facade exposing the ingestion-output and mapping-config stores.
"""

from .stores.base_store import (
    PersistHealth,
    StoreError,
    StoreLockedError,
    StoreNotFoundError,
    StoreValidationError,
)
from .stores.mapping_config_store import MappingConfigStore
from .stores.table_store import TableStore

__all__ = [
    "MappingConfigStore",
    "PersistHealth",
    "StoreError",
    "StoreLockedError",
    "StoreNotFoundError",
    "StoreValidationError",
    "TableStore",
]
