"""Typed access to the collections kept in a key-value store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from rosterpy.domain.model import RecordLayout
from rosterpy.domain.ports import StoreKey

from .schema import (
    EventsPayload,
    HeadersPayload,
    RecordLayoutPayload,
    RecordsPayload,
    ResolutionsPayload,
    RosterPayload,
)
from .translator import (
    event_from_payload,
    event_to_payload,
    layout_from_payload,
    layout_to_payload,
    member_from_payload,
    member_to_payload,
    record_from_payload,
    record_to_payload,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rosterpy.domain.model import RosterMember, TripEvent, TripRecord
    from rosterpy.domain.ports import KeyValueStore

log = logging.getLogger(__name__)

_LAYOUT_ADAPTER = TypeAdapter(RecordLayoutPayload)


class StorePayloadError(RuntimeError):
    """Raised when a persisted value does not match its payload schema."""

    def __init__(self, key: StoreKey, error: ValidationError) -> None:
        super().__init__(f"Stored value for {key!s} is invalid: {error.error_count()} error(s)")
        self.key = key
        self.error = error


class StateRepository:
    """Load and save each collection under its own store key.

    A key that was never written loads as an empty collection.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def _load[TPayload](self, key: StoreKey, adapter: TypeAdapter[TPayload]) -> TPayload | None:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return adapter.validate_python(raw)
        except ValidationError as exc:
            raise StorePayloadError(key, exc) from exc

    def _save[TPayload](
        self, key: StoreKey, adapter: TypeAdapter[TPayload], payload: TPayload
    ) -> None:
        self._store.set(key, adapter.dump_python(payload, mode="json"))
        log.debug("Saved store key %s", key)

    def load_roster(self) -> list[RosterMember]:
        payloads = self._load(StoreKey.ROSTER, RosterPayload) or []
        return [member_from_payload(payload) for payload in payloads]

    def save_roster(self, members: Iterable[RosterMember]) -> None:
        self._save(StoreKey.ROSTER, RosterPayload, [member_to_payload(m) for m in members])

    def load_events(self) -> list[TripEvent]:
        payloads = self._load(StoreKey.EVENTS, EventsPayload) or []
        return [event_from_payload(payload) for payload in payloads]

    def save_events(self, events: Iterable[TripEvent]) -> None:
        self._save(StoreKey.EVENTS, EventsPayload, [event_to_payload(e) for e in events])

    def load_records(self) -> list[TripRecord]:
        payloads = self._load(StoreKey.RECORDS, RecordsPayload) or []
        return [record_from_payload(payload) for payload in payloads]

    def save_records(self, records: Iterable[TripRecord]) -> None:
        self._save(StoreKey.RECORDS, RecordsPayload, [record_to_payload(r) for r in records])

    def load_name_resolutions(self) -> dict[str, str]:
        return self._load(StoreKey.NAME_RESOLUTIONS, ResolutionsPayload) or {}

    def save_name_resolutions(self, resolutions: Mapping[str, str]) -> None:
        self._save(StoreKey.NAME_RESOLUTIONS, ResolutionsPayload, dict(resolutions))

    def load_destination_resolutions(self) -> dict[str, str]:
        return self._load(StoreKey.DESTINATION_RESOLUTIONS, ResolutionsPayload) or {}

    def save_destination_resolutions(self, resolutions: Mapping[str, str]) -> None:
        self._save(StoreKey.DESTINATION_RESOLUTIONS, ResolutionsPayload, dict(resolutions))

    def load_record_layout(self) -> RecordLayout:
        payload = self._load(StoreKey.RECORD_LAYOUT, _LAYOUT_ADAPTER)
        return layout_from_payload(payload) if payload is not None else RecordLayout()

    def save_record_layout(self, layout: RecordLayout) -> None:
        self._save(StoreKey.RECORD_LAYOUT, _LAYOUT_ADAPTER, layout_to_payload(layout))

    def load_custom_headers(self) -> tuple[str, ...]:
        return tuple(self._load(StoreKey.CUSTOM_HEADERS, HeadersPayload) or ())

    def save_custom_headers(self, headers: Iterable[str]) -> None:
        self._save(StoreKey.CUSTOM_HEADERS, HeadersPayload, list(headers))
