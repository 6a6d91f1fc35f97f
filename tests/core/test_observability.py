"""Tests for the JSONL query audit trail."""

from __future__ import annotations

import json
from pathlib import Path

from mockstore.core.observability import JSONLQueryLogger, describe_query
from mockstore.core.results import QueryResult, row_not_found
from mockstore.integrations.query_builder import Action, Filter, QueryDescriptor, SortKey


def _load_events(path: Path) -> list[dict]:
    with path.open("r", encoding="utf-8") as handle:
        return [json.loads(line) for line in handle]


def test_describe_query_summarises_descriptor_without_values() -> None:
    descriptor = QueryDescriptor(
        table="users",
        filters=(Filter(op="eq", column="email", value="a@example.com"),),
        sorts=(SortKey("created_at", ascending=False),),
        limit=1,
        single=True,
    )

    event = describe_query(descriptor, row_not_found(), 0)

    assert event["action"] == "select"
    assert event["filters"] == ["eq:email"]
    assert event["order"] == ["created_at desc"]
    assert event["limit"] == 1
    assert event["single"] is True
    assert event["error"]["code"] == "PGRST116"
    assert "a@example.com" not in json.dumps(event)


def test_jsonl_query_logger_appends_per_store_and_table(tmp_path: Path) -> None:
    logger = JSONLQueryLogger(base_dir=tmp_path, store_name="dev")
    insert = QueryDescriptor(table="users", action=Action.INSERT, rows=({"email": "a"},))
    select = QueryDescriptor(table="users")

    logger.record(insert, QueryResult(data=None), 1)
    logger.record(select, QueryResult(data=[]), 3)
    logger.record(QueryDescriptor(table="workout exercises"), QueryResult(data=[]), 0)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["dev.users.jsonl", "dev.workout-exercises.jsonl"]
    events = _load_events(tmp_path / "dev.users.jsonl")
    assert [event["action"] for event in events] == ["insert", "select"]
    assert events[1]["row_count"] == 3
    assert "error" not in events[0]
    assert events[0]["timestamp"].endswith("Z")


def test_stream_paths_are_scoped_to_the_logger(tmp_path: Path) -> None:
    first = JSONLQueryLogger(base_dir=tmp_path / "a")
    second = JSONLQueryLogger(base_dir=tmp_path / "b")

    assert first.stream_path("users") != second.stream_path("users")
    assert first.stream_path("users") == tmp_path / "a" / "db.users.jsonl"
