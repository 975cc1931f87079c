from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from rosterpy.adapters.memory import InMemoryKeyValueStore
from rosterpy.adapters.sqlalchemy import SqlAlchemyKeyValueStore, create_all_tables
from rosterpy.adapters.sqlalchemy.store import shutdown, startup
from rosterpy.config import ImportConfig
from tests.support.factories import REFERENCE_DATE

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def import_config() -> ImportConfig:
    return ImportConfig(reference_date=REFERENCE_DATE)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyKeyValueStore]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyKeyValueStore()
    finally:
        shutdown()
