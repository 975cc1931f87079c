"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class MemberStatus(StrEnum):
    ACTIVE = "재직"
    LEAVE = "휴직"
    RESIGNED = "퇴직"
    EXPATRIATE = "주재원"


class TripCategory(StrEnum):
    TRIP = "trip"
    VACATION = "vacation"
    EDUCATION = "education"
    OTHERS = "others"


class TripStatus(StrEnum):
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
