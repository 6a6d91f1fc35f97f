"""Factory helpers for constructing the mock client from settings."""

from __future__ import annotations

import logging
from pathlib import Path

from mockstore.core.config import Settings
from mockstore.core.observability import JSONLQueryLogger, QueryObservationSink
from mockstore.integrations.executor import DEFAULT_UNIQUE_CONSTRAINTS, UniqueConstraint
from mockstore.integrations.mock_client import MockClient
from mockstore.integrations.row_store import DEFAULT_TABLES

LOGGER = logging.getLogger(__name__)


def build_client(settings: Settings) -> MockClient:
    """Create a :class:`MockClient` based on *settings*."""

    path = settings.store.resolve_path()
    tables = tuple(settings.store.tables) if settings.store.tables is not None else DEFAULT_TABLES
    constraints = _build_constraints(settings)
    observer = _build_query_logger(settings, path)

    LOGGER.info("Using mock datastore at %s (%d unique constraints)", path, len(constraints))
    return MockClient.open(path, tables=tables, constraints=constraints, observer=observer)


def _build_constraints(settings: Settings) -> tuple[UniqueConstraint, ...]:
    configured = settings.store.unique_constraints
    if configured is None:
        return DEFAULT_UNIQUE_CONSTRAINTS
    return tuple(
        UniqueConstraint(table=entry.table, column=entry.column, message=entry.message)
        for entry in configured
    )


def _build_query_logger(settings: Settings, store_path: Path) -> QueryObservationSink | None:
    if settings.paths is None or not settings.paths.query_logs_dir:
        return None
    path = Path(settings.paths.query_logs_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return JSONLQueryLogger(base_dir=path, store_name=store_path.stem or "db")
