"""Query audit trail: one JSON line per executed query, one file per store table."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from mockstore.core.logging_utils import utc_now_iso
from mockstore.core.results import QueryResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from mockstore.integrations.query_builder import QueryDescriptor


class QueryObservationSink(Protocol):
    """Receives every executed query together with its outcome."""

    def record(
        self, descriptor: "QueryDescriptor", result: QueryResult, row_count: int
    ) -> None:  # pragma: no cover - interface
        ...


def describe_query(descriptor: "QueryDescriptor", result: QueryResult, row_count: int) -> dict[str, Any]:
    """Summarise a query without its payload or filter values (rows may hold emails)."""

    event: dict[str, Any] = {
        "timestamp": utc_now_iso(),
        "table": descriptor.table,
        "action": descriptor.action.value,
        "filters": [f"{condition.op}:{condition.column}" for condition in descriptor.filters],
        "order": [
            f"{key.column} {'asc' if key.ascending else 'desc'}" for key in descriptor.sorts
        ],
        "row_count": row_count,
    }
    if descriptor.limit is not None:
        event["limit"] = descriptor.limit
    if descriptor.single:
        event["single"] = True
    if result.error is not None:
        event["error"] = result.error.to_dict()
    return event


@dataclass(slots=True)
class JSONLQueryLogger(QueryObservationSink):
    """Appends query events to ``<base_dir>/<store_name>.<table>.jsonl``."""

    base_dir: Path
    store_name: str = "db"
    _streams: dict[str, Path] = field(init=False, default_factory=dict)

    def stream_path(self, table: str) -> Path:
        path = self._streams.get(table)
        if path is None:
            safe_table = re.sub(r"[^A-Za-z0-9_-]+", "-", table) or "table"
            path = self.base_dir.expanduser() / f"{self.store_name}.{safe_table}.jsonl"
            path.parent.mkdir(parents=True, exist_ok=True)
            self._streams[table] = path
        return path

    def record(self, descriptor: "QueryDescriptor", result: QueryResult, row_count: int) -> None:  # type: ignore[override]
        event = describe_query(descriptor, result, row_count)
        with self.stream_path(descriptor.table).open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(event, ensure_ascii=False) + "\n")
