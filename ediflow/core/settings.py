from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Dict, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError


load_dotenv(override=False)

ROOT_ENV = "EDIFLOW_ROOT"
DATA_DIR_ENV = "EDIFLOW_DATA_DIR"
SCHEMA_DIR_ENV = "EDIFLOW_SCHEMA_DIR"


class DetectionSettings(BaseModel):
    """Detection knobs shared by every ingestion kind."""

    model_config = ConfigDict(extra="allow")

    min_data_cells: int = 3
    ai_fallback: bool = False
    keywords: Dict[str, List[str]] = Field(default_factory=dict)

    def keywords_for(self, kind: str) -> List[str]:
        return list(self.keywords.get(kind, []))


class Settings(BaseModel):
    """Runtime settings loaded from config/settings.yaml.

    Attributes:
        data_dir: Root holding the ingestion output documents.
        schema_dir: Root holding ``xml/`` and ``json/`` schema folders.
        mapping_config_dir: Directory of per-application mapping configs.
        workbooks: Default workbook path per ingestion kind.
        detection: Keyword lists and detector switches.
    """

    model_config = ConfigDict(extra="allow")

    data_dir: Path
    schema_dir: Path
    mapping_config_dir: Path
    workbooks: Dict[str, str] = Field(default_factory=dict)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)


def _is_frozen() -> bool:
    return getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS")


def _project_root() -> Path:
    env = os.getenv(ROOT_ENV)
    if env:
        return Path(env)
    if _is_frozen():
        return Path(getattr(sys, "_MEIPASS"))  # type: ignore[arg-type]
    # In source layout, this file is under <root>/ediflow/core
    return Path(__file__).resolve().parents[2]


def _config_dir() -> Path:
    return _project_root() / "ediflow" / "config"


def _work_dir() -> Path:
    return _project_root() / "ediflow" / "work"


def ensure_work_dirs() -> dict[str, Path]:
    base = _work_dir()
    out = base / "out"
    tmp = base / "tmp"
    logs = base / "logs"
    for p in (out, tmp, logs):
        p.mkdir(parents=True, exist_ok=True)
    return {"out": out, "tmp": tmp, "logs": logs}


def resolve_config_path(path: str | Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    # Support paths with or without leading 'ediflow/'
    parts = p.parts
    if parts and parts[0] == "ediflow":
        return _project_root() / p
    return _project_root() / "ediflow" / p


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from config/settings.yaml.

    Environment variables ``EDIFLOW_DATA_DIR`` and ``EDIFLOW_SCHEMA_DIR``
    override the directories found in the file.
    """
    cfg_path = Path(path) if path else _config_dir() / "settings.yaml"
    if not cfg_path.exists():
        raise ConfigError(f"settings.yaml not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError("settings.yaml must contain a mapping")

    paths = data.get("paths", {}) or {}
    payload = {
        "data_dir": os.getenv(DATA_DIR_ENV) or resolve_config_path(paths.get("data_dir", "work/data")),
        "schema_dir": os.getenv(SCHEMA_DIR_ENV) or resolve_config_path(paths.get("schema_dir", "schemas")),
        "mapping_config_dir": resolve_config_path(paths.get("mapping_config_dir", "config/mapping_configs")),
        "workbooks": data.get("workbooks", {}) or {},
        "detection": data.get("detection", {}) or {},
    }
    try:
        return Settings.model_validate(payload)
    except ValidationError as e:
        raise ConfigError(f"invalid settings: {e}") from e
