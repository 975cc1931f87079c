"""SQLAlchemy-backed key-value store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, insert, select, update
from sqlalchemy.orm import Session, sessionmaker

from rosterpy.config import get_database_config
from rosterpy.domain.model import utcnow

from .tables import create_all_tables, store_entry_table

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from rosterpy.domain.ports import StoreKey

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy store is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call rosterpy.adapters.sqlalchemy."
                "store.startup() before requesting a store."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, tables, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or get_database_config().uri)
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyKeyValueStore:
    """Store each key as one JSON row, replaced wholesale on write."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory: sessionmaker[Session] = session_factory or _STATE.session_factory

    def get(self, key: StoreKey) -> object | None:
        with self.session_factory() as session:
            return session.execute(
                select(store_entry_table.c.value).where(store_entry_table.c.key == str(key))
            ).scalar_one_or_none()

    def set(self, key: StoreKey, value: object) -> None:
        stamp = utcnow()
        with self.session_factory() as session, session.begin():
            result = session.execute(
                update(store_entry_table)
                .where(store_entry_table.c.key == str(key))
                .values(value=value, updated_at=stamp)
            )
            if result.rowcount == 0:
                session.execute(
                    insert(store_entry_table).values(key=str(key), value=value, updated_at=stamp)
                )
        log.debug("Stored key %s", key)
