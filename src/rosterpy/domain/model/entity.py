"""Identity and timestamp building blocks shared by all entities."""

from __future__ import annotations

from datetime import UTC, date, datetime
from uuid import uuid4


def utcnow() -> datetime:
    return datetime.now(UTC)


def today() -> date:
    """Local calendar date used as the default reference for year inference."""
    return date.today()  # noqa: DTZ011


def new_id() -> str:
    return str(uuid4())
