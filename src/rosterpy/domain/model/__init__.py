"""Domain model for roster, trip events and trip records."""

from __future__ import annotations

from .entity import new_id, today, utcnow
from .enums import MemberStatus, TripCategory, TripStatus
from .roster import NUMERIC_FIELDS, ORGANIZATIONAL_FIELDS, RosterMember
from .trips import EventKey, RecordLayout, TripEvent, TripRecord

__all__ = [
    "NUMERIC_FIELDS",
    "ORGANIZATIONAL_FIELDS",
    "EventKey",
    "MemberStatus",
    "RecordLayout",
    "RosterMember",
    "TripCategory",
    "TripEvent",
    "TripRecord",
    "TripStatus",
    "new_id",
    "today",
    "utcnow",
]
