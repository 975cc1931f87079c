"""SQLAlchemy adapter package for rosterpy."""

from __future__ import annotations

from .store import (
    SqlAlchemyKeyValueStore,
    StartupError,
    is_started,
    shutdown,
    startup,
)
from .tables import create_all_tables, metadata, store_entry_table

__all__ = [
    "SqlAlchemyKeyValueStore",
    "StartupError",
    "create_all_tables",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
    "store_entry_table",
]
