"""Chainable, immutable query builder mirroring the hosted datastore client.

Each chain call returns a new :class:`QueryBuilder` holding a new
:class:`QueryDescriptor`; nothing touches the store until :meth:`execute`
is awaited. Supported surface::

    await client.from_("exercises").select("*").ilike("name", "%squat%").order("created_at", ascending=False).execute()
"""

from __future__ import annotations

import enum
import operator
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable

from mockstore.core.results import QueryResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from mockstore.integrations.mock_client import MockClient

_MISSING = object()


class Action(str, enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    return left == right


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(value: Any, target: Any) -> bool:
        if value is None or target is None:
            return False
        try:
            return bool(op(value, target))
        except TypeError:
            return False

    return check


def like_to_regex(pattern: str, *, case_sensitive: bool) -> re.Pattern[str]:
    """Translate a LIKE pattern (``%`` matches any run) into an anchored regex."""

    body = ".*".join(re.escape(part) for part in pattern.split("%"))
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile(f"^{body}$", flags)


@dataclass(slots=True, frozen=True)
class Filter:
    """One row predicate; a query's filters are ANDed together."""

    op: str
    column: str
    value: Any
    _regex: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    def matches(self, row: Mapping[str, Any]) -> bool:
        actual = row.get(self.column, _MISSING)
        if actual is _MISSING:
            return False
        if self.op == "eq":
            return _strict_equals(actual, self.value)
        if self.op == "neq":
            return not _strict_equals(actual, self.value)
        if self.op in ("like", "ilike"):
            return isinstance(actual, str) and self._regex is not None and bool(self._regex.match(actual))
        if self.op == "in":
            return any(_strict_equals(actual, candidate) for candidate in self.value)
        return _RANGE_CHECKS[self.op](actual, self.value)


_RANGE_CHECKS: dict[str, Callable[[Any, Any], bool]] = {
    "gt": _compare(operator.gt),
    "gte": _compare(operator.ge),
    "lt": _compare(operator.lt),
    "lte": _compare(operator.le),
}


@dataclass(slots=True, frozen=True)
class SortKey:
    column: str
    ascending: bool = True


@dataclass(slots=True, frozen=True)
class QueryDescriptor:
    """Accumulated, not-yet-executed description of one table operation."""

    table: str
    action: Action = Action.SELECT
    filters: tuple[Filter, ...] = ()
    sorts: tuple[SortKey, ...] = ()
    limit: int | None = None
    single: bool = False
    returning: bool = False
    columns: str = "*"
    rows: tuple[Any, ...] = ()
    patch: Any = None

    def matches(self, row: Mapping[str, Any]) -> bool:
        return all(condition.matches(row) for condition in self.filters)


def _require_column(column: str) -> str:
    if not isinstance(column, str) or not column:
        raise TypeError("Column name must be a non-empty string")
    return column


@dataclass(slots=True, frozen=True)
class QueryBuilder:
    """Fluent wrapper producing a fresh descriptor on every chained call."""

    client: "MockClient"
    descriptor: QueryDescriptor

    def _with(self, **changes: Any) -> "QueryBuilder":
        return QueryBuilder(client=self.client, descriptor=replace(self.descriptor, **changes))

    def _filter(self, op: str, column: str, value: Any, regex: re.Pattern[str] | None = None) -> "QueryBuilder":
        condition = Filter(op=op, column=_require_column(column), value=value, _regex=regex)
        return self._with(filters=self.descriptor.filters + (condition,))

    def select(self, columns: str = "*") -> "QueryBuilder":
        # Projection is accepted for compatibility; every column is returned.
        return self._with(returning=True, columns=columns)

    def insert(self, rows: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> "QueryBuilder":
        if isinstance(rows, Mapping):
            normalized: tuple[Any, ...] = (rows,)
        elif isinstance(rows, (str, bytes)):
            normalized = (rows,)
        else:
            normalized = tuple(rows)
        return self._with(action=Action.INSERT, rows=normalized)

    def update(self, patch: Mapping[str, Any]) -> "QueryBuilder":
        return self._with(action=Action.UPDATE, patch=patch)

    def delete(self) -> "QueryBuilder":
        return self._with(action=Action.DELETE)

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter("eq", column, value)

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter("neq", column, value)

    def gt(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter("gt", column, value)

    def gte(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter("gte", column, value)

    def lt(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter("lt", column, value)

    def lte(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter("lte", column, value)

    def in_(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._filter("in", column, tuple(values))

    def like(self, column: str, pattern: str) -> "QueryBuilder":
        return self._filter("like", column, pattern, like_to_regex(pattern, case_sensitive=True))

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        return self._filter("ilike", column, pattern, like_to_regex(pattern, case_sensitive=False))

    def order(self, column: str, *, ascending: bool = True) -> "QueryBuilder":
        key = SortKey(column=_require_column(column), ascending=bool(ascending))
        return self._with(sorts=self.descriptor.sorts + (key,))

    def limit(self, count: int) -> "QueryBuilder":
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError("limit() expects an integer")
        if count < 0:
            raise ValueError("limit() must be zero or greater")
        return self._with(limit=count)

    def single(self) -> "QueryBuilder":
        return self._with(single=True)

    async def execute(self) -> QueryResult:
        """Run the described operation; resolves to a result, never raises."""

        return await self.client.run(self.descriptor)


__all__ = [
    "Action",
    "Filter",
    "QueryBuilder",
    "QueryDescriptor",
    "SortKey",
    "like_to_regex",
]
