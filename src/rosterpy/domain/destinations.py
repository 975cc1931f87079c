"""Cross-reference trip events with trip records to find a destination.

Resolution order for one event:
1. a saved event -> record choice, if that record still exists with a destination
2. records with the same name whose dates overlap the event (name only when
   either side lacks dates), restricted to records that carry a destination

Zero candidates is "no match", one is an automatic match and two or more are
returned for the user to choose from. Nothing here persists a choice; callers
record it with :func:`choose_destination` and store the returned mapping.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rosterpy.domain.errors import UnknownEntityError
from rosterpy.domain.parsing import format_short_date, intervals_overlap

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from rosterpy.domain.model import TripEvent, TripRecord

log = logging.getLogger(__name__)

type DestinationResolutions = dict[str, str]

_PAREN_SUFFIX = re.compile(r"^(.+?)\(.*?\)$")


@dataclass(frozen=True, slots=True, kw_only=True)
class DestinationMatch:
    destination: str
    record_id: str
    identity_key: str
    start_date: str
    end_date: str
    group: str
    part: str
    purpose: str

    @classmethod
    def from_record(cls, record: TripRecord) -> DestinationMatch:
        return cls(
            destination=record.destination,
            record_id=record.id,
            identity_key=record.identity_key or "",
            start_date=record.start_date,
            end_date=record.end_date,
            group=record.group,
            part=record.part,
            purpose=record.purpose,
        )


@dataclass(frozen=True, slots=True)
class DestinationResult:
    match: DestinationMatch | None = None
    needs_user_choice: bool = False
    candidates: tuple[DestinationMatch, ...] = field(default_factory=tuple)


def _has_complete_dates(start: str, end: str) -> bool:
    return bool(start and end)


def _is_candidate(event: TripEvent, record: TripRecord) -> bool:
    if record.name != event.name:
        return False
    if _has_complete_dates(record.start_date, record.end_date) and _has_complete_dates(
        event.start_date, event.end_date
    ):
        return intervals_overlap(
            event.start_date, event.end_date, record.start_date, record.end_date
        )
    return True


def resolve_destination(
    event: TripEvent,
    records: Sequence[TripRecord],
    saved_resolutions: Mapping[str, str],
) -> DestinationResult:
    """Find the destination record for ``event`` without persisting anything."""

    saved_record_id = saved_resolutions.get(event.id)
    if saved_record_id:
        saved = next((record for record in records if record.id == saved_record_id), None)
        if saved is not None and saved.destination:
            return DestinationResult(match=DestinationMatch.from_record(saved))
        log.debug("Ignoring stale destination choice for event %s", event.id)

    candidates = tuple(
        DestinationMatch.from_record(record)
        for record in records
        if _is_candidate(event, record) and record.destination
    )
    if not candidates:
        return DestinationResult()
    if len(candidates) == 1:
        return DestinationResult(match=candidates[0], candidates=candidates)
    return DestinationResult(needs_user_choice=True, candidates=candidates)


def resolve_destinations(
    events: Iterable[TripEvent],
    records: Sequence[TripRecord],
    saved_resolutions: Mapping[str, str],
) -> dict[str, DestinationResult]:
    return {
        event.id: resolve_destination(event, records, saved_resolutions) for event in events
    }


def choose_destination(
    saved: Mapping[str, str],
    event_id: str,
    record_id: str,
    *,
    records: Iterable[TripRecord] | None = None,
) -> DestinationResolutions:
    """Return a copy of ``saved`` recording the user's record pick for an event."""

    if records is not None and record_id not in {record.id for record in records}:
        raise UnknownEntityError(f"No trip record with id {record_id!r}")
    return {**saved, event_id: record_id}


def prune_destination_resolutions(
    saved: Mapping[str, str],
    events: Iterable[TripEvent],
    records: Iterable[TripRecord],
) -> DestinationResolutions:
    """Drop saved picks whose event or record has been deleted."""

    event_ids = {event.id for event in events}
    record_ids = {record.id for record in records}
    return {
        event_id: record_id
        for event_id, record_id in saved.items()
        if event_id in event_ids and record_id in record_ids
    }


def build_display_label(
    purpose: str,
    match: DestinationMatch | None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> str:
    """Label shown for an event, e.g. ``해외출장(SDV : 1/12 ~ 2/3)``.

    With a match, the destination and the record's dates replace any
    parenthesised suffix. Without one, a multi-day event gets its own date range
    in parentheses and a single-day event keeps the purpose as is.
    """

    if match is not None and match.destination:
        start = format_short_date(match.start_date)
        end = format_short_date(match.end_date)
        return _with_suffix(purpose, f"{match.destination} : {start} ~ {end}")

    if start_date and end_date and start_date != end_date:
        start = format_short_date(start_date)
        end = format_short_date(end_date)
        return _with_suffix(purpose, f"{start} ~ {end}")

    return purpose


def _with_suffix(purpose: str, suffix: str) -> str:
    paren = _PAREN_SUFFIX.match(purpose)
    base = paren.group(1) if paren else purpose
    return f"{base}({suffix})"
