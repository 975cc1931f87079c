"""Port for the key-value store that holds imported collections."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable


class StoreKey(StrEnum):
    ROSTER = "roster"
    EVENTS = "events"
    RECORDS = "records"
    NAME_RESOLUTIONS = "name_resolutions"
    DESTINATION_RESOLUTIONS = "destination_resolutions"
    RECORD_LAYOUT = "record_layout"
    CUSTOM_HEADERS = "custom_headers"


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal contract for persisting JSON-compatible values by key.

    ``get`` returns ``None`` for a key that was never written. Values are replaced
    wholesale; there is no partial update.
    """

    def get(self, key: StoreKey) -> object | None: ...

    def set(self, key: StoreKey, value: object) -> None: ...
