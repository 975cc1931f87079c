"""Application orchestration entry points.

Every service follows the same shape: load a snapshot of the stored
collections, hand it to the pure domain functions, then save the collections
they return. Nothing in :mod:`rosterpy.domain` touches the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from rosterpy.adapters.sqlalchemy import SqlAlchemyKeyValueStore, is_started, startup
from rosterpy.adapters.store import StateRepository
from rosterpy.config import ImportConfig, get_import_config
from rosterpy.domain.destinations import (
    build_display_label,
    choose_destination,
    prune_destination_resolutions,
    resolve_destinations,
)
from rosterpy.domain.errors import UnknownEntityError
from rosterpy.domain.events import (
    apply_name_resolution,
    merge_events,
    parse_events,
    refresh_event_statuses,
)
from rosterpy.domain.identity import choose_identity, prune_name_resolutions
from rosterpy.domain.model import today
from rosterpy.domain.records import drop_records, merge_records, parse_records
from rosterpy.domain.roster_import import (
    edit_member,
    merge_custom_headers,
    merge_roster,
    parse_roster,
    replace_roster,
)

if TYPE_CHECKING:
    from datetime import date, datetime

    from rosterpy.domain.destinations import DestinationResult
    from rosterpy.domain.events import EventMergeResult, EventParseResult
    from rosterpy.domain.model import RosterMember, TripEvent
    from rosterpy.domain.ports import KeyValueStore
    from rosterpy.domain.records import RecordMergeResult, RecordParseResult
    from rosterpy.domain.roster_import import RosterMergeResult, RosterParseResult


log = getLogger(__name__)


@dataclass(slots=True)
class RosterImportResult:
    parse: RosterParseResult
    merge: RosterMergeResult
    custom_headers: tuple[str, ...] = ()


@dataclass(slots=True)
class EventImportResult:
    parse: EventParseResult
    merge: EventMergeResult


@dataclass(slots=True)
class RecordImportResult:
    parse: RecordParseResult
    merge: RecordMergeResult


@dataclass(slots=True)
class EventDestination:
    event: TripEvent
    result: DestinationResult
    label: str


@dataclass(slots=True)
class DeleteResult:
    removed: int = 0
    pruned_resolutions: int = 0


def _repository(store: KeyValueStore | None) -> StateRepository:
    if store is None:
        if not is_started():
            startup()
        store = SqlAlchemyKeyValueStore()
    return StateRepository(store)


def import_roster(
    text: str,
    *,
    store: KeyValueStore | None = None,
    overwrite: bool = False,
    config: ImportConfig | None = None,
    now: datetime | None = None,
) -> RosterImportResult:
    """Parse a roster paste and merge it into (or, with ``overwrite``, replace) the roster."""

    repository = _repository(store)
    settings = config or get_import_config()
    parsed = parse_roster(text, delimiter=settings.delimiter, now=now)

    existing = repository.load_roster()
    if overwrite:
        merged = replace_roster(parsed.members)
    else:
        merged = merge_roster(existing, parsed.members, now=now)
    custom_headers = merge_custom_headers(repository.load_custom_headers(), parsed.custom_headers)

    repository.save_roster(merged.merged)
    repository.save_custom_headers(custom_headers)
    if overwrite:
        resolutions = repository.load_name_resolutions()
        repository.save_name_resolutions(prune_name_resolutions(resolutions, merged.merged))

    log.info(
        "Roster import finished: overwrite=%s, added=%s, updated=%s, unchanged=%s, skipped=%s",
        overwrite,
        merged.added,
        merged.updated,
        merged.unchanged,
        parsed.skipped_rows,
    )
    return RosterImportResult(parse=parsed, merge=merged, custom_headers=custom_headers)


def import_events(
    text: str,
    *,
    store: KeyValueStore | None = None,
    config: ImportConfig | None = None,
    now: datetime | None = None,
) -> EventImportResult:
    """Parse schedule blocks and append the events that are not stored yet."""

    repository = _repository(store)
    settings = config or get_import_config()
    parsed = parse_events(
        text,
        repository.load_roster(),
        reference_date=settings.reference_date,
        name_resolutions=repository.load_name_resolutions(),
        location=settings.event_location,
        now=now,
    )
    merged = merge_events(repository.load_events(), parsed.events)
    repository.save_events(merged.merged)

    log.info(
        "Event import finished: added=%s, duplicates=%s, unknown_names=%s, ambiguous_names=%s",
        merged.added,
        merged.duplicates,
        len(parsed.unknown_names),
        len(parsed.ambiguous_names),
    )
    return EventImportResult(parse=parsed, merge=merged)


def import_records(
    text: str,
    *,
    store: KeyValueStore | None = None,
    config: ImportConfig | None = None,
    now: datetime | None = None,
) -> RecordImportResult:
    """Parse a tabular export and append its records, remembering the table shape."""

    repository = _repository(store)
    settings = config or get_import_config()
    parsed = parse_records(
        text,
        reference_date=settings.reference_date,
        delimiter=settings.delimiter,
        now=now,
    )
    merged = merge_records(
        repository.load_records(), parsed, layout=repository.load_record_layout()
    )
    repository.save_records(merged.merged)
    repository.save_record_layout(merged.layout)

    if parsed.errors:
        log.warning("Record import skipped %s line(s): %s", len(parsed.errors), parsed.errors)
    log.info("Record import finished: added=%s", merged.added)
    return RecordImportResult(parse=parsed, merge=merged)


def resolve_event_destinations(*, store: KeyValueStore | None = None) -> list[EventDestination]:
    """Resolve every stored event against the stored records and label it."""

    repository = _repository(store)
    events = repository.load_events()
    results = resolve_destinations(
        events,
        repository.load_records(),
        repository.load_destination_resolutions(),
    )
    resolved: list[EventDestination] = []
    for event in events:
        result = results[event.id]
        label = build_display_label(event.purpose, result.match, event.start_date, event.end_date)
        resolved.append(EventDestination(event=event, result=result, label=label))
    return resolved


def choose_event_identity(
    name: str,
    identity_key: str,
    *,
    store: KeyValueStore | None = None,
    now: datetime | None = None,
) -> int:
    """Record the user's roster pick for ``name`` and attach it to unresolved events.

    Returns the number of stored events that picked up the identity key.
    """

    repository = _repository(store)
    resolutions = choose_identity(
        repository.load_name_resolutions(),
        name,
        identity_key,
        roster=repository.load_roster(),
    )
    events = repository.load_events()
    updated = apply_name_resolution(events, name, identity_key, now=now)
    changed = sum(1 for before, after in zip(events, updated, strict=True) if before is not after)

    repository.save_name_resolutions(resolutions)
    repository.save_events(updated)
    log.info("Resolved name %s to %s on %s event(s)", name, identity_key, changed)
    return changed


def choose_event_destination(
    event_id: str,
    record_id: str,
    *,
    store: KeyValueStore | None = None,
) -> None:
    """Record the user's trip record pick for an event."""

    repository = _repository(store)
    if event_id not in {event.id for event in repository.load_events()}:
        raise UnknownEntityError(f"No trip event with id {event_id!r}")
    resolutions = choose_destination(
        repository.load_destination_resolutions(),
        event_id,
        record_id,
        records=repository.load_records(),
    )
    repository.save_destination_resolutions(resolutions)
    log.info("Resolved destination for event %s to record %s", event_id, record_id)


def edit_roster_member(
    identity_key: str,
    *,
    store: KeyValueStore | None = None,
    now: datetime | None = None,
    **changes: object,
) -> RosterMember:
    repository = _repository(store)
    roster = repository.load_roster()
    for index, member in enumerate(roster):
        if member.identity_key == identity_key:
            roster[index] = edit_member(member, now=now, **changes)
            repository.save_roster(roster)
            return roster[index]
    raise UnknownEntityError(f"No roster member with identity key {identity_key!r}")


def refresh_statuses(*, store: KeyValueStore | None = None, on: date | None = None) -> int:
    """Recompute every stored event status for ``on`` (default today)."""

    repository = _repository(store)
    events = repository.load_events()
    refreshed = refresh_event_statuses(events, on or today())
    repository.save_events(refreshed)
    return sum(1 for before, after in zip(events, refreshed, strict=True) if before is not after)


def delete_event(event_id: str, *, store: KeyValueStore | None = None) -> DeleteResult:
    repository = _repository(store)
    events = repository.load_events()
    remaining = [event for event in events if event.id != event_id]
    if len(remaining) == len(events):
        raise UnknownEntityError(f"No trip event with id {event_id!r}")

    saved = repository.load_destination_resolutions()
    pruned = prune_destination_resolutions(saved, remaining, repository.load_records())
    repository.save_events(remaining)
    repository.save_destination_resolutions(pruned)
    return DeleteResult(
        removed=len(events) - len(remaining),
        pruned_resolutions=len(saved) - len(pruned),
    )


def delete_record(record_id: str, *, store: KeyValueStore | None = None) -> DeleteResult:
    repository = _repository(store)
    records = repository.load_records()
    remaining = drop_records(records, (record_id,))
    if len(remaining) == len(records):
        raise UnknownEntityError(f"No trip record with id {record_id!r}")

    saved = repository.load_destination_resolutions()
    pruned = prune_destination_resolutions(saved, repository.load_events(), remaining)
    repository.save_records(remaining)
    repository.save_destination_resolutions(pruned)
    return DeleteResult(
        removed=len(records) - len(remaining),
        pruned_resolutions=len(saved) - len(pruned),
    )


def delete_member(identity_key: str, *, store: KeyValueStore | None = None) -> DeleteResult:
    repository = _repository(store)
    roster = repository.load_roster()
    remaining = [member for member in roster if member.identity_key != identity_key]
    if len(remaining) == len(roster):
        raise UnknownEntityError(f"No roster member with identity key {identity_key!r}")

    saved = repository.load_name_resolutions()
    pruned = prune_name_resolutions(saved, remaining)
    repository.save_roster(remaining)
    repository.save_name_resolutions(pruned)
    return DeleteResult(
        removed=len(roster) - len(remaining),
        pruned_resolutions=len(saved) - len(pruned),
    )
