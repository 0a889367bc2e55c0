"""
RESPONSIBILITIES
- Serve the per-table JSON documents written by the ingestion runner.
- Group tables by message type (mappings, information items) or code type.
PROCESS OVERVIEW
1. init_store() ensures the three document folders exist under the data root.
2. load() reads every per-table document once; aggregate files are skipped.
3. Lookups prefer ``tableType == 'mapping'`` for mappings, else the first table.
4. healthcheck() reports folder access and document counts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ediflow_persist.stores.base_store import BaseStore, PersistHealth
from ediflow_persist.utils.log import get_logger
from ediflow_persist.utils.paths import ensure_structure, resolve_root

Document = Dict[str, Any]

MAPPINGS_DIR = "mappings"
CODE_DEFINITIONS_DIR = "code-definitions"
INFORMATION_ITEMS_DIR = "information-items"

# Folder -> (aggregate file, grouping key, list key)
_LAYOUT: Dict[str, tuple[str, str, str]] = {
    MAPPINGS_DIR: ("mappings.json", "messageType", "fields"),
    CODE_DEFINITIONS_DIR: ("code-definitions.json", "codeType", "codes"),
    INFORMATION_ITEMS_DIR: ("information-items.json", "messageType", "items"),
}

PREFERRED_MAPPING_TYPE = "mapping"


class TableStore(BaseStore):
    """Read-only access to ingestion outputs under a data root."""

    def __init__(self, root: str | Path | None = None) -> None:
        super().__init__(logger=get_logger("table_store"))
        self.root = resolve_root(root)
        self._tables: Dict[str, Dict[str, List[Document]]] = {}
        self._loaded = False

    def init_store(self) -> Path:
        ensure_structure(self.root, subdirs=_LAYOUT.keys())
        return self.root

    def load(self, *, force: bool = False) -> None:
        if self._loaded and not force:
            return
        self._tables = {folder: self._load_folder(folder) for folder in _LAYOUT}
        self._loaded = True

    def _load_folder(self, folder: str) -> Dict[str, List[Document]]:
        aggregate, group_key, list_key = _LAYOUT[folder]
        directory = self.root / folder
        grouped: Dict[str, List[Document]] = {}
        if not directory.exists():
            self.logger.warning("%s directory not found. Run ingestion first.", directory)
            return grouped

        for path in sorted(directory.glob("*.json")):
            if path.name == aggregate:
                continue
            try:
                with path.open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
                key = data[group_key]
                count = len(data[list_key])
            except (OSError, ValueError, KeyError, TypeError) as exc:
                self.logger.error("Error loading %s/%s: %s", folder, path.name, exc)
                continue
            grouped.setdefault(key, []).append(data)
            table_info = f" ({data['tableType']})" if data.get("tableType") else ""
            self.logger.debug("Loaded %s: %s%s (%s %s)", folder, key, table_info, count, list_key)
        return grouped

    def _group(self, folder: str) -> Dict[str, List[Document]]:
        self.load()
        return self._tables.get(folder, {})

    @staticmethod
    def _pick(tables: List[Document], table_type: str | None, preferred: str | None = None) -> Optional[Document]:
        if not tables:
            return None
        if table_type:
            return next((t for t in tables if t.get("tableType") == table_type), None)
        if preferred:
            match = next((t for t in tables if t.get("tableType") == preferred), None)
            if match is not None:
                return match
        return tables[0]

    def get_mapping(self, message_type: str, table_type: str | None = None) -> Optional[Document]:
        return self._pick(self._group(MAPPINGS_DIR).get(message_type, []), table_type, PREFERRED_MAPPING_TYPE)

    def find_all_tables_for_message_type(self, message_type: str) -> List[Document]:
        return list(self._group(MAPPINGS_DIR).get(message_type, []))

    def get_all_mappings(self) -> List[Document]:
        return [t for tables in self._group(MAPPINGS_DIR).values() for t in tables]

    def get_code_definition(self, code_type: str, table_type: str | None = None) -> Optional[Document]:
        return self._pick(self._group(CODE_DEFINITIONS_DIR).get(code_type, []), table_type)

    def get_all_code_definitions(self) -> List[Document]:
        return [t for tables in self._group(CODE_DEFINITIONS_DIR).values() for t in tables]

    def find_code_by_value(self, code_type: str, code: str, table_type: str | None = None) -> Optional[Document]:
        definition = self.get_code_definition(code_type, table_type)
        if definition is None:
            return None
        return next((c for c in definition.get("codes", []) if c.get("code") == code), None)

    def get_information_items(self, message_type: str, table_type: str | None = None) -> Optional[Document]:
        return self._pick(self._group(INFORMATION_ITEMS_DIR).get(message_type, []), table_type)

    def get_information_items_by_message_type(self, message_type: str) -> List[Document]:
        return list(self._group(INFORMATION_ITEMS_DIR).get(message_type, []))

    def get_all_information_items(self) -> List[Document]:
        return [t for tables in self._group(INFORMATION_ITEMS_DIR).values() for t in tables]

    def healthcheck(self) -> PersistHealth:
        self.load(force=True)
        writable = {folder: self._writable(self.root / folder) for folder in _LAYOUT}
        counts = {folder: sum(len(v) for v in self._tables.get(folder, {}).values()) for folder in _LAYOUT}
        issues = [f"missing or read-only: {folder}" for folder, ok in writable.items() if not ok]
        return PersistHealth(writable_paths=writable, record_counts=counts, issues=issues)
