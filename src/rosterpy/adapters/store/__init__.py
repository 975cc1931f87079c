"""Store payload schemas and the repository built on top of them."""

from __future__ import annotations

from .repository import StateRepository, StorePayloadError

__all__ = [
    "StateRepository",
    "StorePayloadError",
]
