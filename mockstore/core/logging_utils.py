"""Clock helpers for row timestamps and process-wide logging setup."""

from __future__ import annotations

import logging
from datetime import UTC, datetime


def utc_now_iso() -> str:
    """Return the current UTC time in ISO-8601 with millisecond precision (``created_at``)."""

    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_stamp(moment: datetime | None = None) -> str:
    """Compact UTC stamp used to name quarantined store files, e.g. ``20240501T102030123``."""

    return (moment or datetime.now(UTC)).strftime("%Y%m%dT%H%M%S%f")[:-3]


def configure_logging(debug: bool = False) -> None:
    """Install a basic console handler unless the host already configured logging."""

    root_logger = logging.getLogger()
    if root_logger.handlers:
        if debug:
            root_logger.setLevel(logging.DEBUG)
        return
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
