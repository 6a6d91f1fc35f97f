"""Tests for client construction from settings."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from mockstore.core.config import PathsSettings, Settings, StoreSettings, UniqueConstraintSettings
from mockstore.core.dependencies import build_client
from mockstore.core.observability import JSONLQueryLogger
from mockstore.integrations.executor import DEFAULT_UNIQUE_CONSTRAINTS


@pytest.fixture()
def base_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("TEST_DB_PATH", str(tmp_path / "db.json"))
    return Settings(store=StoreSettings(path_env="TEST_DB_PATH"))


def test_build_client_uses_defaults(base_settings: Settings, tmp_path: Path) -> None:
    client = build_client(base_settings)

    assert client.store.file_path == tmp_path / "db.json"
    assert client.constraints == DEFAULT_UNIQUE_CONSTRAINTS
    assert client.observer is None


def test_build_client_applies_configured_tables_and_constraints(base_settings: Settings) -> None:
    base_settings.store.tables = ["profiles"]
    base_settings.store.unique_constraints = [UniqueConstraintSettings(table="profiles", column="handle")]

    client = build_client(base_settings)
    first = asyncio.run(client.from_("profiles").insert({"handle": "lifter"}).execute())
    second = asyncio.run(client.from_("profiles").insert({"handle": "lifter"}).execute())
    users = asyncio.run(client.from_("users").insert([{"email": "a"}, {"email": "a"}]).execute())

    assert client.store.table_names[0] == "profiles"
    assert first.ok
    assert second.error is not None
    assert users.ok


def test_build_client_wires_query_logger(base_settings: Settings, tmp_path: Path) -> None:
    logs_dir = tmp_path / "logs"
    base_settings.paths = PathsSettings(query_logs_dir=str(logs_dir))

    client = build_client(base_settings)
    asyncio.run(client.from_("workouts").select().execute())

    assert isinstance(client.observer, JSONLQueryLogger)
    assert len(list(logs_dir.glob("db.workouts.jsonl"))) == 1
