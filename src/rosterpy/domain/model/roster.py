"""Roster members: the canonical personnel identity records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import Final

from .entity import utcnow
from .enums import MemberStatus

ORGANIZATIONAL_FIELDS: Final[tuple[str, ...]] = (
    "name",
    "employee_id",
    "department",
    "group",
    "part",
    "process_type",
    "position",
    "position_year",
    "birth_year",
    "work_location",
)
NUMERIC_FIELDS: Final[frozenset[str]] = frozenset({"position_year", "birth_year"})


@dataclass(frozen=True, slots=True, kw_only=True)
class RosterMember:
    """One person on the roster, keyed by ``identity_key`` across imports."""

    id: str
    identity_key: str
    name: str
    employee_id: str = ""
    department: str = ""
    group: str = ""
    part: str = ""
    process_type: str = ""
    position: str = ""
    position_year: int = 0
    birth_year: int = 0
    work_location: str = ""
    status: MemberStatus = MemberStatus.ACTIVE
    custom_fields: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
