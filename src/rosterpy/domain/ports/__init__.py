"""Domain port definitions for adapters."""

from __future__ import annotations

from .store import KeyValueStore, StoreKey

__all__ = [
    "KeyValueStore",
    "StoreKey",
]
