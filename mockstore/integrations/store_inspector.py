"""Utilities for inspecting the JSON document backing the mock datastore."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mockstore.core.logging_utils import configure_logging
from mockstore.integrations.row_store import DEFAULT_TABLES, JsonRowStore, Row


@dataclass(slots=True)
class StoreInspector:
    """Loads high-level metadata for each table of a store file."""

    path: Path
    max_preview_rows: int = 3
    _tables: dict[str, list[Row]] = field(init=False, default_factory=dict)
    _loaded: bool = field(init=False, default=False)

    def load(self) -> None:
        """Read the store document; an unreadable one is moved aside as the client would."""

        if not self.path.exists():
            raise FileNotFoundError(f"Store file not found at '{self.path}'")
        store = JsonRowStore(path=self.path, tables=DEFAULT_TABLES)
        self._tables = store.snapshot()
        self._loaded = True

    @property
    def tables(self) -> dict[str, list[Row]]:
        if not self._loaded:
            self.load()
        return self._tables

    def describe_table(self, name: str) -> dict[str, Any]:
        rows = self.tables.get(name)
        if rows is None:
            raise KeyError(f"Table '{name}' not found in {self.path}")

        columns: list[str] = []
        for row in rows:
            for column in row:
                if column not in columns:
                    columns.append(column)
        return {
            "row_count": len(rows),
            "columns": columns,
            "preview_rows": rows[: self.max_preview_rows],
        }

    def describe(self, table: str | None = None) -> dict[str, Any]:
        """Return a structured summary of the store, or of a single table."""

        names = [table] if table else sorted(self.tables)
        return {
            "path": str(self.path),
            "table_count": len(self.tables),
            "tables": {name: self.describe_table(name) for name in names},
        }


def _build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect the mock datastore JSON file")
    parser.add_argument("path", type=Path, help="Path to the store document (db.json)")
    parser.add_argument(
        "--max-preview-rows",
        type=int,
        default=3,
        help="Number of rows per table to include in the preview output",
    )
    parser.add_argument("--table", default=None, help="Only describe this table")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_cli()
    args = parser.parse_args(argv)
    configure_logging(debug=args.debug)
    inspector = StoreInspector(path=args.path, max_preview_rows=args.max_preview_rows)
    summary = inspector.describe(table=args.table)
    print(json.dumps(summary, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
