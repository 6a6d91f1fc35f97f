"""Tests for the JSON-file row store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from mockstore.integrations.row_store import DEFAULT_TABLES, JsonRowStore


def test_missing_file_starts_with_default_tables(tmp_path: Path) -> None:
    store = JsonRowStore(path=tmp_path / "db.json")

    assert store.table_names == list(DEFAULT_TABLES)
    assert store.get("users") == []
    assert not (tmp_path / "db.json").exists()


def test_commit_writes_full_document(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "db.json"
    store = JsonRowStore(path=path)

    store.commit("workouts", [{"id": "w1", "name": "Leg Day"}])

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["workouts"] == [{"id": "w1", "name": "Leg Day"}]
    assert set(DEFAULT_TABLES) <= set(document)
    assert list(tmp_path.joinpath("nested").glob("*.tmp")) == []


def test_get_returns_copies(tmp_path: Path) -> None:
    store = JsonRowStore(path=tmp_path / "db.json")
    store.commit("workouts", [{"id": "w1"}])

    rows = store.get("workouts")
    rows[0]["id"] = "changed"
    rows.append({"id": "w2"})

    assert store.get("workouts") == [{"id": "w1"}]


def test_reload_adds_missing_default_tables(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    path.write_text(json.dumps({"workouts": [{"id": "w1"}], "custom": []}), encoding="utf-8")

    store = JsonRowStore(path=path)

    assert store.get("workouts") == [{"id": "w1"}]
    assert "custom" in store.table_names
    assert "users" in store.table_names


def test_corrupt_file_is_moved_aside(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "db.json"
    path.write_text('{"users": [', encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        store = JsonRowStore(path=path)

    assert store.get("users") == []
    assert not path.exists()
    quarantined = list(tmp_path.glob("db.json.corrupt-*"))
    assert len(quarantined) == 1
    assert quarantined[0].read_text(encoding="utf-8") == '{"users": ['
    assert "Failed to load store" in caplog.text


def test_non_object_document_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    store = JsonRowStore(path=path)

    assert store.table_names == list(DEFAULT_TABLES)


def test_non_list_tables_are_dropped(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    path.write_text(json.dumps({"workouts": {"id": "w1"}, "exercises": [{"id": "e1"}]}), encoding="utf-8")

    store = JsonRowStore(path=path)

    assert store.get("workouts") == []
    assert store.get("exercises") == [{"id": "e1"}]


def test_failed_commit_restores_memory(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonRowStore(path=blocker / "db.json")

    with pytest.raises(OSError):
        store.commit("workouts", [{"id": "w1"}])

    assert store.get("workouts") == []


def test_snapshot_is_independent(tmp_path: Path) -> None:
    store = JsonRowStore(path=tmp_path / "db.json", tables=("users",))
    store.commit("users", [{"id": "u1"}])

    snapshot = store.snapshot()
    snapshot["users"][0]["id"] = "changed"

    assert store.get("users") == [{"id": "u1"}]
    assert store.table_names == ["users"]
