"""Translate between store payloads and domain entities."""

from __future__ import annotations

from rosterpy.domain.model import RecordLayout, RosterMember, TripEvent, TripRecord

from .schema import RecordLayoutPayload, RosterMemberPayload, TripEventPayload, TripRecordPayload


def member_from_payload(payload: RosterMemberPayload) -> RosterMember:
    return RosterMember(
        id=payload.id,
        identity_key=payload.identity_key,
        name=payload.name,
        employee_id=payload.employee_id,
        department=payload.department,
        group=payload.group,
        part=payload.part,
        process_type=payload.process_type,
        position=payload.position,
        position_year=payload.position_year,
        birth_year=payload.birth_year,
        work_location=payload.work_location,
        status=payload.status,
        custom_fields=dict(payload.custom_fields),
        created_at=payload.created_at,
        updated_at=payload.updated_at,
    )


def member_to_payload(member: RosterMember) -> RosterMemberPayload:
    return RosterMemberPayload(
        id=member.id,
        identity_key=member.identity_key,
        name=member.name,
        employee_id=member.employee_id,
        department=member.department,
        group=member.group,
        part=member.part,
        process_type=member.process_type,
        position=member.position,
        position_year=member.position_year,
        birth_year=member.birth_year,
        work_location=member.work_location,
        status=member.status,
        custom_fields=dict(member.custom_fields),
        created_at=member.created_at,
        updated_at=member.updated_at,
    )


def event_from_payload(payload: TripEventPayload) -> TripEvent:
    return TripEvent(
        id=payload.id,
        identity_key=payload.identity_key,
        name=payload.name,
        start_date=payload.start_date,
        end_date=payload.end_date,
        location=payload.location,
        purpose=payload.purpose,
        category=payload.category,
        status=payload.status,
        created_at=payload.created_at,
        updated_at=payload.updated_at,
    )


def event_to_payload(event: TripEvent) -> TripEventPayload:
    return TripEventPayload(
        id=event.id,
        identity_key=event.identity_key,
        name=event.name,
        start_date=event.start_date,
        end_date=event.end_date,
        location=event.location,
        purpose=event.purpose,
        category=event.category,
        status=event.status,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def record_from_payload(payload: TripRecordPayload) -> TripRecord:
    return TripRecord(
        id=payload.id,
        identity_key=payload.identity_key,
        name=payload.name,
        group=payload.group,
        part=payload.part,
        destination=payload.destination,
        start_date=payload.start_date,
        end_date=payload.end_date,
        purpose=payload.purpose,
        raw_data=tuple(payload.raw_data),
        created_at=payload.created_at,
        updated_at=payload.updated_at,
    )


def record_to_payload(record: TripRecord) -> TripRecordPayload:
    return TripRecordPayload(
        id=record.id,
        identity_key=record.identity_key,
        name=record.name,
        group=record.group,
        part=record.part,
        destination=record.destination,
        start_date=record.start_date,
        end_date=record.end_date,
        purpose=record.purpose,
        raw_data=list(record.raw_data),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def layout_from_payload(payload: RecordLayoutPayload) -> RecordLayout:
    return RecordLayout(max_columns=payload.max_columns, headers=tuple(payload.headers))


def layout_to_payload(layout: RecordLayout) -> RecordLayoutPayload:
    return RecordLayoutPayload(max_columns=layout.max_columns, headers=list(layout.headers))
