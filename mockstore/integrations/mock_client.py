"""Drop-in stand-in for the hosted datastore client, backed by a JSON file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from mockstore.core.observability import QueryObservationSink
from mockstore.core.results import QueryResult
from mockstore.integrations.executor import DEFAULT_UNIQUE_CONSTRAINTS, UniqueConstraint, run_query
from mockstore.integrations.query_builder import QueryBuilder, QueryDescriptor
from mockstore.integrations.row_store import DEFAULT_TABLES, JsonRowStore


@dataclass(slots=True)
class MockClient:
    """Entry point exposing ``from_(table)`` like the hosted client does."""

    store: JsonRowStore
    constraints: tuple[UniqueConstraint, ...] = DEFAULT_UNIQUE_CONSTRAINTS
    observer: QueryObservationSink | None = field(default=None)

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        tables: Iterable[str] = DEFAULT_TABLES,
        constraints: Iterable[UniqueConstraint] = DEFAULT_UNIQUE_CONSTRAINTS,
        observer: QueryObservationSink | None = None,
    ) -> "MockClient":
        """Load (or initialise) the store at *path* and wrap it in a client."""

        store = JsonRowStore(path=path, tables=tuple(tables))
        return cls(store=store, constraints=tuple(constraints), observer=observer)

    def from_(self, table: str) -> QueryBuilder:
        if not isinstance(table, str) or not table:
            raise TypeError("Table name must be a non-empty string")
        return QueryBuilder(client=self, descriptor=QueryDescriptor(table=table))

    def table(self, table: str) -> QueryBuilder:
        return self.from_(table)

    async def run(self, descriptor: QueryDescriptor) -> QueryResult:
        return await run_query(self.store, descriptor, self.constraints, self.observer)
