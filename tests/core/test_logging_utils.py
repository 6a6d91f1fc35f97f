"""Tests for clock and logging helpers."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from mockstore.core.logging_utils import configure_logging, file_stamp, utc_now_iso


def test_file_stamp_formats_milliseconds() -> None:
    moment = datetime(2024, 5, 1, 10, 20, 30, 123456, tzinfo=UTC)

    assert file_stamp(moment) == "20240501T102030123"


def test_file_stamp_defaults_to_now() -> None:
    assert len(file_stamp()) == 18


def test_utc_now_iso_has_millisecond_precision() -> None:
    value = utc_now_iso()

    assert value.endswith("Z")
    assert len(value.split(".")[1]) == 4


def test_configure_logging_respects_existing_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    existing = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [existing])
    monkeypatch.setattr(root, "level", logging.WARNING)

    configure_logging(debug=True)

    assert root.handlers == [existing]
    assert root.level == logging.DEBUG
