"""Pydantic models describing the persisted store payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from rosterpy.domain.model import MemberStatus, TripCategory, TripStatus


def _none_to_blank(value: object) -> object:
    return "" if value is None else value


class StoreBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RosterMemberPayload(StoreBaseModel):
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
    custom_fields: dict[str, str] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    _normalize_text = field_validator(
        "employee_id",
        "department",
        "group",
        "part",
        "process_type",
        "position",
        "work_location",
        mode="before",
    )(_none_to_blank)


class TripEventPayload(StoreBaseModel):
    id: str
    identity_key: str | None = None
    name: str
    start_date: str
    end_date: str
    location: str = ""
    purpose: str = ""
    category: TripCategory = TripCategory.TRIP
    status: TripStatus = TripStatus.PLANNED
    created_at: datetime
    updated_at: datetime


class TripRecordPayload(StoreBaseModel):
    id: str
    identity_key: str = ""
    name: str = ""
    group: str = ""
    part: str = ""
    destination: str = ""
    start_date: str = ""
    end_date: str = ""
    purpose: str = ""
    raw_data: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    _normalize_text = field_validator(
        "identity_key",
        "group",
        "part",
        "destination",
        "start_date",
        "end_date",
        "purpose",
        mode="before",
    )(_none_to_blank)


class RecordLayoutPayload(StoreBaseModel):
    max_columns: int = Field(default=0, ge=0)
    headers: list[str] = Field(default_factory=list)


RosterPayload = TypeAdapter(list[RosterMemberPayload])
EventsPayload = TypeAdapter(list[TripEventPayload])
RecordsPayload = TypeAdapter(list[TripRecordPayload])
ResolutionsPayload = TypeAdapter(dict[str, str])
HeadersPayload = TypeAdapter(list[str])
