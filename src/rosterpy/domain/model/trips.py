"""Trip events parsed from schedule blocks and trip records from tabular exports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003

from .entity import new_id, utcnow
from .enums import TripCategory, TripStatus

type EventKey = tuple[str, str, str]


@dataclass(frozen=True, slots=True, kw_only=True)
class TripEvent:
    """A trip, leave or education block; dates are inclusive ISO strings."""

    id: str = field(default_factory=new_id)
    identity_key: str | None = None
    name: str
    start_date: str
    end_date: str
    location: str = ""
    purpose: str = ""
    category: TripCategory = TripCategory.TRIP
    status: TripStatus = TripStatus.PLANNED
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def dedup_key(self) -> EventKey:
        return (self.name, self.start_date, self.end_date)


@dataclass(frozen=True, slots=True, kw_only=True)
class TripRecord:
    """A row from an attendance/trip export; ``raw_data`` keeps the cells verbatim."""

    id: str = field(default_factory=new_id)
    identity_key: str = ""
    name: str = ""
    group: str = ""
    part: str = ""
    destination: str = ""
    start_date: str = ""
    end_date: str = ""
    purpose: str = ""
    raw_data: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True, slots=True)
class RecordLayout:
    """Table shape remembered between record imports."""

    max_columns: int = 0
    headers: tuple[str, ...] = ()
