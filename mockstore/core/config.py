"""Utilities for loading store settings from YAML configuration files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_STORE_PATH = "data/db.json"
DEFAULT_PATH_ENV = "MOCKSTORE_DB_PATH"


@dataclass(slots=True)
class UniqueConstraintSettings:
    table: str
    column: str
    message: str | None = None


@dataclass(slots=True)
class StoreSettings:
    path_env: str = DEFAULT_PATH_ENV
    default_path: str = DEFAULT_STORE_PATH
    tables: list[str] | None = None
    unique_constraints: list[UniqueConstraintSettings] | None = None

    def resolve_path(self) -> Path:
        """Return the JSON file path, preferring the configured environment variable."""

        value = os.getenv(self.path_env) if self.path_env else None
        return Path(value or self.default_path).expanduser()


@dataclass(slots=True)
class PathsSettings:
    query_logs_dir: str | None = None


@dataclass(slots=True)
class LoggingSettings:
    debug: bool = False


@dataclass(slots=True)
class Settings:
    store: StoreSettings
    paths: PathsSettings | None = None
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_settings(path: str | Path) -> Settings:
    """Read configuration from *path* and return structured settings."""

    config_path = Path(path)
    raw = _load_yaml(config_path)

    if not isinstance(raw, dict):
        raise ValueError(f"Configuration at '{config_path}' must be a mapping")

    store_raw = raw.get("store") or {}
    if not isinstance(store_raw, dict):
        raise ValueError("'store' must be a mapping")
    tables_raw = store_raw.get("tables")
    if tables_raw is not None and not isinstance(tables_raw, list):
        raise ValueError("'tables' must be a list of table names")
    tables = [str(name) for name in tables_raw] if tables_raw is not None else None

    constraints_raw = store_raw.get("unique_constraints")
    constraints = None
    if constraints_raw is not None:
        constraints = []
        if not isinstance(constraints_raw, list):
            raise ValueError("'unique_constraints' must be a list")
        for entry in constraints_raw:
            if not isinstance(entry, dict):
                raise ValueError("unique_constraints entries must be mappings")
            if not entry.get("table") or not entry.get("column"):
                raise ValueError("unique_constraints entries require 'table' and 'column'")
            message = entry.get("message")
            constraints.append(
                UniqueConstraintSettings(
                    table=str(entry["table"]),
                    column=str(entry["column"]),
                    message=str(message) if message else None,
                )
            )

    store = StoreSettings(
        path_env=str(store_raw.get("path_env", DEFAULT_PATH_ENV)),
        default_path=str(store_raw.get("default_path", DEFAULT_STORE_PATH)),
        tables=tables,
        unique_constraints=constraints,
    )

    paths_raw: dict[str, Any] | None = raw.get("paths")
    paths = None
    if paths_raw:
        if not isinstance(paths_raw, dict):
            raise ValueError("'paths' must be a mapping")
        query_logs_dir = paths_raw.get("query_logs_dir")
        paths = PathsSettings(
            query_logs_dir=str(query_logs_dir) if query_logs_dir else None,
        )

    logging_raw = raw.get("logging") or {}
    if not isinstance(logging_raw, dict):
        raise ValueError("'logging' must be a mapping")
    logging_settings = LoggingSettings(debug=bool(logging_raw.get("debug", False)))

    return Settings(store=store, paths=paths, logging=logging_settings)
