"""In-memory key-value store, used by tests and one-off CLI runs."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rosterpy.domain.ports import StoreKey


class InMemoryKeyValueStore:
    """Dictionary-backed store; values are deep-copied in and out."""

    def __init__(self, initial: Mapping[StoreKey, object] | None = None) -> None:
        self._values: dict[StoreKey, object] = {
            key: copy.deepcopy(value) for key, value in (initial or {}).items()
        }

    def get(self, key: StoreKey) -> object | None:
        value = self._values.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: StoreKey, value: object) -> None:
        self._values[key] = copy.deepcopy(value)
