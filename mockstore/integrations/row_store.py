"""JSON-file backed row store holding every table of the mock datastore.

The whole database lives in memory as ``{table: [row, ...]}`` and is mirrored
to a single JSON document. Every commit rewrites the full document through a
temporary file and an atomic rename, so a crash mid-write leaves either the
previous or the new document on disk, never a truncated one.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from mockstore.core.logging_utils import file_stamp

LOGGER = logging.getLogger(__name__)

Row = dict[str, Any]

DEFAULT_TABLES: tuple[str, ...] = (
    "users",
    "daily_logs",
    "workouts",
    "exercises",
    "workout_exercises",
)


@dataclass(slots=True)
class JsonRowStore:
    """Process-wide table snapshot with load-on-construct and save-on-commit."""

    path: str | Path
    tables: Iterable[str] = DEFAULT_TABLES
    _path: Path = field(init=False)
    _known_tables: tuple[str, ...] = field(init=False)
    _data: dict[str, list[Row]] = field(init=False, default_factory=dict)
    lock: threading.RLock = field(init=False, repr=False, default_factory=threading.RLock)

    def __post_init__(self) -> None:
        self._path = Path(self.path).expanduser()
        self._known_tables = tuple(self.tables)
        self.load()

    @property
    def file_path(self) -> Path:
        return self._path

    @property
    def table_names(self) -> list[str]:
        with self.lock:
            return list(self._data)

    def load(self) -> None:
        """Reload the database from disk; unreadable documents degrade to empty tables."""

        with self.lock:
            self._data = self._read_document()
            for name in self._known_tables:
                self._data.setdefault(name, [])

    def get(self, table: str) -> list[Row]:
        """Return a copy of *table*'s rows, registering the table in memory if new."""

        with self.lock:
            rows = self._data.setdefault(table, [])
            return [dict(row) for row in rows]

    def commit(self, table: str, rows: list[Row]) -> None:
        """Replace *table* with *rows* and persist the whole document."""

        with self.lock:
            previous = self._data.get(table)
            self._data[table] = [dict(row) for row in rows]
            try:
                self._write_document()
            except Exception:
                if previous is None:
                    self._data.pop(table, None)
                else:
                    self._data[table] = previous
                raise

    def snapshot(self) -> dict[str, list[Row]]:
        """Return a deep copy of every table."""

        with self.lock:
            return copy.deepcopy(self._data)

    def _read_document(self) -> dict[str, list[Row]]:
        path = self._path
        if not path.exists():
            return {}

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Failed to load store from %s: %s", path, exc)
            self._quarantine()
            return {}

        if not isinstance(raw, dict):
            LOGGER.warning(
                "Store document at %s is a %s, expected an object of tables",
                path,
                type(raw).__name__,
            )
            self._quarantine()
            return {}

        data: dict[str, list[Row]] = {}
        for name, rows in raw.items():
            if not isinstance(rows, list):
                LOGGER.warning("Dropping table %r from %s: expected a list of rows", name, path)
                continue
            data[str(name)] = [dict(row) for row in rows if isinstance(row, dict)]
        return data

    def _quarantine(self) -> None:
        target = self._path.with_name(f"{self._path.name}.corrupt-{file_stamp()}")
        try:
            os.replace(self._path, target)
        except OSError as exc:
            LOGGER.warning("Could not move unreadable store %s aside: %s", self._path, exc)
            return
        LOGGER.warning("Moved unreadable store to %s; starting from empty tables", target)

    def _write_document(self) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._data, handle, ensure_ascii=False, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        LOGGER.debug("Persisted %d tables to %s", len(self._data), self._path)


__all__ = ["DEFAULT_TABLES", "JsonRowStore", "Row"]
