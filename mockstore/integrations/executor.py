"""Deferred executor applying a query descriptor to the row store.

``execute_query`` is the synchronous core: it reads the current table,
computes the result and, for mutations, commits the new table before
returning. ``run_query`` yields to the event loop once and then runs the core
under the store lock, so two queued executions never interleave.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from mockstore.core.logging_utils import utc_now_iso
from mockstore.core.observability import QueryObservationSink
from mockstore.core.results import (
    UNIQUE_VIOLATION_CODE,
    QueryResult,
    multiple_rows_found,
    row_not_found,
)
from mockstore.integrations.query_builder import Action, QueryDescriptor, SortKey
from mockstore.integrations.row_store import JsonRowStore, Row

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class UniqueConstraint:
    """Declares that *column* must be unique across the rows of *table*."""

    table: str
    column: str
    message: str | None = None

    def describe(self) -> str:
        if self.message:
            return self.message
        return f'duplicate key value violates unique constraint "{self.table}_{self.column}_key"'


DEFAULT_UNIQUE_CONSTRAINTS: tuple[UniqueConstraint, ...] = (
    UniqueConstraint(table="users", column="email", message="User already exists"),
)


class UniqueViolation(Exception):
    def __init__(self, constraint: UniqueConstraint, value: Any) -> None:
        super().__init__(constraint.describe())
        self.constraint = constraint
        self.value = value


_TYPE_RANKS: tuple[tuple[type, int], ...] = ((bool, 0), (int, 1), (float, 1), (str, 2))


def sort_key(value: Any) -> tuple[int, Any]:
    """Total-order key: values group by type (bool, number, string, other) then compare."""

    for kind, rank in _TYPE_RANKS:
        if isinstance(value, kind):
            return (rank, value)
    return (3, json.dumps(value, sort_keys=True, default=str))


def _sort_rows(rows: list[Row], sorts: Iterable[SortKey]) -> list[Row]:
    ordered = list(rows)
    # Stable sorts applied from the least to the most significant key.
    for key in reversed(tuple(sorts)):
        present = [row for row in ordered if row.get(key.column) is not None]
        absent = [row for row in ordered if row.get(key.column) is None]
        present.sort(key=lambda row: sort_key(row[key.column]), reverse=not key.ascending)
        ordered = present + absent if key.ascending else absent + present
    return ordered


def _check_unique(
    table: str,
    existing: list[Row],
    new_rows: list[Row],
    constraints: Iterable[UniqueConstraint],
) -> None:
    for constraint in constraints:
        if constraint.table != table:
            continue
        seen = {
            row.get(constraint.column)
            for row in existing
            if row.get(constraint.column) is not None
        }
        for row in new_rows:
            value = row.get(constraint.column)
            if value is None:
                continue
            if value in seen:
                raise UniqueViolation(constraint, value)
            seen.add(value)


def _build_insert_rows(payload: Iterable[Any]) -> list[Row]:
    prepared: list[Row] = []
    for entry in payload:
        if not isinstance(entry, Mapping):
            raise TypeError(f"insert() expects mapping rows, got {type(entry).__name__}")
        row = dict(entry)
        row["id"] = str(uuid4())
        row["created_at"] = utc_now_iso()
        prepared.append(row)
    return prepared


def _plan(
    current: list[Row],
    descriptor: QueryDescriptor,
    constraints: Iterable[UniqueConstraint],
) -> tuple[list[Row], list[Row] | None]:
    """Return the affected rows and the replacement table (``None`` when nothing changes)."""

    if descriptor.action is Action.INSERT:
        new_rows = _build_insert_rows(descriptor.rows)
        _check_unique(descriptor.table, current, new_rows, constraints)
        return [dict(row) for row in new_rows], (current + new_rows if new_rows else None)

    if descriptor.action is Action.UPDATE:
        if not isinstance(descriptor.patch, Mapping):
            raise TypeError("update() expects a mapping patch")
        patch = dict(descriptor.patch)
        updated: list[Row] = []
        replaced: list[Row] = []
        for row in current:
            if descriptor.matches(row):
                merged = {**row, **patch}
                updated.append(merged)
                replaced.append(merged)
            else:
                replaced.append(row)
        return [dict(row) for row in updated], (replaced if updated else None)

    if descriptor.action is Action.DELETE:
        removed: list[Row] = []
        remaining: list[Row] = []
        for row in current:
            if descriptor.matches(row):
                removed.append(row)
            else:
                remaining.append(row)
        return removed, (remaining if removed else None)

    return [row for row in current if descriptor.matches(row)], None


def _shape(descriptor: QueryDescriptor, rows: list[Row]) -> QueryResult:
    """Sort, limit and apply the single-row rule to the affected rows.

    ``single()`` with zero rows reports ``PGRST116`` for mutations as well as
    selects, as the hosted client does. The older JavaScript mock resolved
    ``{data: null, error: null}`` for an update/delete matching nothing, so
    handlers ported from it must treat ``PGRST116`` as "not found".
    """

    if descriptor.sorts:
        rows = _sort_rows(rows, descriptor.sorts)
    if descriptor.limit is not None:
        rows = rows[: descriptor.limit]

    if descriptor.single:
        if not rows:
            return row_not_found()
        if len(rows) > 1:
            return multiple_rows_found()
        return QueryResult(data=rows[0])

    if descriptor.action is not Action.SELECT and not descriptor.returning:
        return QueryResult(data=None)
    return QueryResult(data=rows)


def execute_query(
    store: JsonRowStore,
    descriptor: QueryDescriptor,
    constraints: Iterable[UniqueConstraint] = DEFAULT_UNIQUE_CONSTRAINTS,
    observer: QueryObservationSink | None = None,
) -> QueryResult:
    """Apply *descriptor* to *store* and return the ``{data, error}`` outcome.

    The result is shaped before anything is committed and an error result
    (including a mutation whose affected rows break the ``single()`` rule)
    means nothing was written.
    """

    affected = 0
    try:
        with store.lock:
            rows, replacement = _plan(store.get(descriptor.table), descriptor, constraints)
            result = _shape(descriptor, rows)
            if replacement is not None and result.ok:
                store.commit(descriptor.table, replacement)
        affected = len(rows)
    except UniqueViolation as exc:
        LOGGER.info(
            "Rejected insert into %s: duplicate %s=%r",
            descriptor.table,
            exc.constraint.column,
            exc.value,
        )
        result = QueryResult.failure(str(exc), UNIQUE_VIOLATION_CODE)
    except Exception as exc:
        LOGGER.exception("Mock store %s on %s failed", descriptor.action.value, descriptor.table)
        result = QueryResult.failure(str(exc) or exc.__class__.__name__)

    if observer is not None:
        try:
            observer.record(descriptor, result, affected)
        except Exception:  # pragma: no cover - defensive
            LOGGER.warning("Query observer failed for table %s", descriptor.table, exc_info=True)
    return result


async def run_query(
    store: JsonRowStore,
    descriptor: QueryDescriptor,
    constraints: Iterable[UniqueConstraint] = DEFAULT_UNIQUE_CONSTRAINTS,
    observer: QueryObservationSink | None = None,
) -> QueryResult:
    """Defer to the next loop iteration, then execute atomically."""

    await asyncio.sleep(0)
    return execute_query(store, descriptor, constraints, observer)


__all__ = [
    "DEFAULT_UNIQUE_CONSTRAINTS",
    "UniqueConstraint",
    "UniqueViolation",
    "execute_query",
    "run_query",
    "sort_key",
]
