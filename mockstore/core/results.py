"""Result and error shapes returned by every executed query.

The mock client mirrors the hosted datastore client: execution never raises,
it resolves to a ``{data, error}`` pair and callers branch on ``error``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

NOT_FOUND_CODE = "PGRST116"
UNIQUE_VIOLATION_CODE = "23505"


@dataclass(slots=True, frozen=True)
class QueryError:
    """Structured error delivered through the result channel."""

    message: str
    code: str | None = None
    details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.code is not None:
            payload["code"] = self.code
        if self.details is not None:
            payload["details"] = self.details
        return payload


@dataclass(slots=True, frozen=True)
class QueryResult:
    """Outcome of one executed query: rows (or a single row) or an error."""

    data: Any = None
    error: QueryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "error": self.error.to_dict() if self.error is not None else None,
        }

    @classmethod
    def failure(cls, message: str, code: str | None = None) -> "QueryResult":
        return cls(data=None, error=QueryError(message=message, code=code))


def row_not_found() -> QueryResult:
    return QueryResult.failure("Row not found", NOT_FOUND_CODE)


def multiple_rows_found() -> QueryResult:
    return QueryResult.failure("Multiple rows found", NOT_FOUND_CODE)


__all__ = [
    "NOT_FOUND_CODE",
    "UNIQUE_VIOLATION_CODE",
    "QueryError",
    "QueryResult",
    "multiple_rows_found",
    "row_not_found",
]
