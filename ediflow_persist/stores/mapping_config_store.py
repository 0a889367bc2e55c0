"""
RESPONSIBILITIES
- Persist per-application mapping configurations as one YAML file per application.
- Answer the lookups the mapper needs (by id, by application and message type).
- Expose registered applications to the message router.
PROCESS OVERVIEW
1. init_store() ensures the configuration directory exists.
2. Reads parse every ``*.yaml`` file with ruamel.yaml and validate each config.
3. create/update/delete/save rewrite the owning application's file under a lock.
4. healthcheck() reports directory access and configuration counts.
"""

from __future__ import annotations

import io
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ediflow.services.mapping.models import FieldMapping, MappingConfig
from ediflow.services.messaging.models import Application
from ediflow_persist.stores.base_store import (
    BaseStore,
    PersistHealth,
    StoreNotFoundError,
    StoreValidationError,
)
from ediflow_persist.utils.file_io import atomic_write_text, file_lock
from ediflow_persist.utils.log import get_logger

_APP_KEYS = ("app_id", "app_name")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(slots=True)
class _AppFile:
    path: Path
    app_id: str
    app_name: str = ""
    active: bool = True
    configs: List[MappingConfig] = field(default_factory=list)


class MappingConfigStore(BaseStore):
    """YAML-backed store of :class:`MappingConfig` records."""

    def __init__(self, config_dir: str | Path) -> None:
        super().__init__(logger=get_logger("mapping_config_store"))
        self.config_dir = Path(config_dir)

    def init_store(self) -> Path:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        return self.config_dir.resolve()

    # -- reading -----------------------------------------------------------

    def _read_file(self, path: Path) -> Optional[_AppFile]:
        yaml = YAML(typ="safe")
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.load(fh) or {}
        except (OSError, YAMLError) as exc:
            self.logger.error("Cannot read mapping config %s: %s", path.name, exc)
            return None
        if not isinstance(data, dict) or not data.get("app_id"):
            self.logger.error("Mapping config %s has no app_id", path.name)
            return None

        app = _AppFile(
            path=path,
            app_id=str(data["app_id"]),
            app_name=str(data.get("app_name") or ""),
            active=bool(data.get("active", True)),
        )
        for raw in data.get("configs") or []:
            payload = {**raw, "app_id": app.app_id, "app_name": app.app_name}
            try:
                app.configs.append(MappingConfig.model_validate(payload))
            except ValidationError as exc:
                self.logger.error("Invalid mapping config in %s: %s", path.name, exc)
        return app

    def _apps(self) -> List[_AppFile]:
        if not self.config_dir.exists():
            return []
        apps = (self._read_file(p) for p in sorted(self.config_dir.glob("*.yaml")))
        return [app for app in apps if app is not None]

    def _app(self, app_id: str) -> Optional[_AppFile]:
        return next((a for a in self._apps() if a.app_id == app_id), None)

    def find_by_id(self, config_id: str) -> Optional[MappingConfig]:
        for app in self._apps():
            for config in app.configs:
                if config.id == config_id:
                    return config
        return None

    def find_by_application(self, app_id: str) -> List[MappingConfig]:
        app = self._app(app_id)
        return list(app.configs) if app else []

    def find_by_application_and_message_type(self, app_id: str, message_type: str) -> Optional[MappingConfig]:
        return next((c for c in self.find_by_application(app_id) if c.message_type == message_type), None)

    def find_application(self, app_id: str) -> Optional[Application]:
        app = self._app(app_id)
        if app is None:
            return None
        return Application(id=app.app_id, name=app.app_name, is_active=app.active)

    def list_applications(self) -> List[Application]:
        return [Application(id=a.app_id, name=a.app_name, is_active=a.active) for a in self._apps()]

    # -- writing -----------------------------------------------------------

    def _dump(self, app: _AppFile) -> str:
        document: Dict[str, Any] = {
            "app_id": app.app_id,
            "app_name": app.app_name,
            "active": app.active,
            "configs": [
                c.model_dump(mode="json", exclude=set(_APP_KEYS), exclude_none=True) for c in app.configs
            ],
        }
        yaml = YAML(typ="safe")
        yaml.default_flow_style = False
        buffer = io.StringIO()
        yaml.dump(document, buffer)
        return buffer.getvalue()

    def _write(self, app: _AppFile) -> None:
        with file_lock(app.path):
            atomic_write_text(app.path, self._dump(app))
        self.logger.info("Saved %s mapping config(s) for %s", len(app.configs), app.app_id)

    def _app_for_write(self, app_id: str, app_name: str = "") -> _AppFile:
        app = self._app(app_id)
        if app is None:
            self.init_store()
            app = _AppFile(path=self.config_dir / f"{app_id}.yaml", app_id=app_id, app_name=app_name)
        elif app_name:
            app.app_name = app_name
        return app

    def create(
        self,
        app_id: str,
        app_name: str,
        message_type: str,
        field_mappings: Iterable[FieldMapping | Mapping[str, Any]],
        format_type: str = "json",
    ) -> MappingConfig:
        """Register a new configuration; one per application and message type.

        Raises:
            StoreValidationError: On invalid input or a duplicate message type.
        """

        app = self._app_for_write(app_id, app_name)
        if any(c.message_type == message_type for c in app.configs):
            raise StoreValidationError(f"mapping config already exists for {app_id}/{message_type}")
        now = _utcnow()
        try:
            config = MappingConfig.model_validate(
                {
                    "id": str(uuid.uuid4()),
                    "app_id": app_id,
                    "app_name": app.app_name,
                    "message_type": message_type,
                    "field_mappings": list(field_mappings),
                    "format_type": format_type,
                    "created_at": now,
                    "updated_at": now,
                }
            )
        except ValidationError as exc:
            raise StoreValidationError(str(exc)) from exc
        app.configs.append(config)
        self._write(app)
        return config

    def update(self, config_id: str, **changes: Any) -> MappingConfig:
        """Apply ``changes`` (snake_case field names) to an existing configuration.

        Raises:
            StoreNotFoundError: When no configuration has ``config_id``.
            StoreValidationError: When the result does not validate.
        """

        for app in self._apps():
            for index, config in enumerate(app.configs):
                if config.id != config_id:
                    continue
                payload = config.model_dump(exclude_unset=True)
                payload.update(changes)
                payload.update({"id": config.id, "app_id": app.app_id, "updated_at": _utcnow()})
                try:
                    updated = MappingConfig.model_validate(payload)
                except ValidationError as exc:
                    raise StoreValidationError(str(exc)) from exc
                app.configs[index] = updated
                self._write(app)
                return updated
        raise StoreNotFoundError(f"mapping config not found: {config_id}")

    def delete(self, config_id: str) -> bool:
        for app in self._apps():
            remaining = [c for c in app.configs if c.id != config_id]
            if len(remaining) != len(app.configs):
                app.configs = remaining
                self._write(app)
                return True
        return False

    def save(self, config: MappingConfig) -> MappingConfig:
        """Insert or replace ``config`` by id within its application's file."""

        app = self._app_for_write(config.app_id, config.app_name)
        stamped = config.model_copy(update={"updated_at": _utcnow(), "created_at": config.created_at or _utcnow()})
        app.configs = [c for c in app.configs if c.id != config.id] + [stamped]
        self._write(app)
        return stamped

    def healthcheck(self) -> PersistHealth:
        apps = self._apps()
        writable = {"mapping_configs": self._writable(self.config_dir)}
        issues = [] if writable["mapping_configs"] else [f"missing or read-only: {self.config_dir}"]
        return PersistHealth(
            writable_paths=writable,
            record_counts={a.app_id: len(a.configs) for a in apps},
            issues=issues,
        )
