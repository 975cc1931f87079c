"""Parse free-text schedule blocks into trip events.

A schedule paste is a flat run of three-line blocks::

    01-14 ~ 02-11
    강병훈
    해외출장(생산법인)

possibly interleaved with noise such as ``종일`` markers or daily summaries. The
scanner walks the lines with an explicit index: a date-range line followed by a
plausible name line consumes three lines, anything else advances by one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

from rosterpy.domain.identity import (
    AmbiguousIdentity,
    ResolvedIdentity,
    UnresolvedIdentity,
    build_name_index,
    resolve_identity,
)
from rosterpy.domain.model import (
    TripCategory,
    TripEvent,
    TripStatus,
    today,
    utcnow,
)
from rosterpy.domain.parsing import decode_lines, normalize_date_range, parse_iso_date

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import date, datetime

    from rosterpy.domain.model import EventKey, RosterMember

log = logging.getLogger(__name__)

DEFAULT_EVENT_LOCATION: Final[str] = "해외"

_DATE_TOKEN = r"\d{1,2}[-.]\d{1,2}|\d{4}-\d{1,2}-\d{1,2}"
DATE_RANGE_PATTERN: Final = re.compile(rf"^({_DATE_TOKEN})\s*~\s*({_DATE_TOKEN})$")

# Lines that follow a date range but are duration markers, not names.
NON_NAME_TOKENS: Final[frozenset[str]] = frozenset({"종일", "반일", "all day", "half day"})

# Checked in order; the first category whose keyword appears in the purpose wins.
CATEGORY_KEYWORDS: Final[tuple[tuple[TripCategory, tuple[str, ...]], ...]] = (
    (TripCategory.VACATION, ("연차", "반차", "휴가", "휴무", "vacation", "leave")),
    (TripCategory.EDUCATION, ("교육", "연수", "세미나", "훈련", "training", "education")),
    (TripCategory.OTHERS, ("예비군", "민방위", "병가", "건강검진")),
)


@dataclass(slots=True)
class EventParseResult:
    events: list[TripEvent] = field(default_factory=list)
    unknown_names: list[str] = field(default_factory=list)
    ambiguous_names: dict[str, tuple[RosterMember, ...]] = field(default_factory=dict)


@dataclass(slots=True)
class EventMergeResult:
    merged: list[TripEvent]
    added: int = 0
    duplicates: int = 0


def classify_purpose(purpose: str) -> TripCategory:
    lowered = purpose.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return TripCategory.TRIP


def derive_event_status(start_date: str, end_date: str, on: date) -> TripStatus:
    """Lifecycle status of an inclusive ``[start, end]`` interval on day ``on``."""

    start = parse_iso_date(start_date)
    end = parse_iso_date(end_date)
    if start is None or end is None:
        return TripStatus.PLANNED
    if on < start:
        return TripStatus.PLANNED
    if on > end:
        return TripStatus.COMPLETED
    return TripStatus.ACTIVE


def is_candidate_name(line: str) -> bool:
    if not line or line[0].isdigit():
        return False
    return line.lower() not in NON_NAME_TOKENS


def parse_events(
    text: str,
    roster: Sequence[RosterMember] = (),
    *,
    reference_date: date | None = None,
    name_resolutions: Mapping[str, str] | None = None,
    location: str = DEFAULT_EVENT_LOCATION,
    now: datetime | None = None,
) -> EventParseResult:
    """Scan ``text`` for date-range/name/purpose blocks and match names to the roster."""

    reference = reference_date or today()
    stamp = now or utcnow()
    index_by_name = build_name_index(roster)
    known_keys = frozenset(member.identity_key for member in roster)
    lines = [line for _, line in decode_lines(text)]

    result = EventParseResult()
    unknown: dict[str, None] = {}
    cursor = 0
    while cursor < len(lines):
        range_match = DATE_RANGE_PATTERN.match(lines[cursor])
        if range_match is None or cursor + 2 >= len(lines):
            cursor += 1
            continue

        name = lines[cursor + 1]
        purpose = lines[cursor + 2]
        if not is_candidate_name(name):
            cursor += 1
            continue

        start_date, end_date = normalize_date_range(
            range_match.group(1), range_match.group(2), reference
        )
        identity = resolve_identity(
            name,
            index_by_name,
            known_keys=known_keys,
            name_resolutions=name_resolutions,
        )
        identity_key: str | None = None
        match identity:
            case ResolvedIdentity():
                identity_key = identity.identity_key
            case AmbiguousIdentity():
                result.ambiguous_names.setdefault(name, identity.candidates)
            case UnresolvedIdentity():
                unknown.setdefault(name)

        result.events.append(
            TripEvent(
                identity_key=identity_key,
                name=name,
                start_date=start_date,
                end_date=end_date,
                location=location,
                purpose=purpose,
                category=classify_purpose(purpose),
                status=derive_event_status(start_date, end_date, reference),
                created_at=stamp,
                updated_at=stamp,
            )
        )
        cursor += 3

    parsed_count = len(result.events)
    result.events = dedupe_events(result.events)
    result.unknown_names = list(unknown)
    log.info(
        "Parsed events: blocks=%s, unique=%s, unknown_names=%s, ambiguous_names=%s",
        parsed_count,
        len(result.events),
        len(result.unknown_names),
        len(result.ambiguous_names),
    )
    return result


def dedupe_events(events: Iterable[TripEvent]) -> list[TripEvent]:
    """Keep the first event for every ``(name, start, end)`` key."""

    seen: set[EventKey] = set()
    unique: list[TripEvent] = []
    for event in events:
        if event.dedup_key in seen:
            continue
        seen.add(event.dedup_key)
        unique.append(event)
    return unique


def merge_events(existing: Sequence[TripEvent], parsed: Iterable[TripEvent]) -> EventMergeResult:
    """Append parsed events whose dedup key is not stored yet."""

    seen = {event.dedup_key for event in existing}
    merged = list(existing)
    duplicates = 0
    for event in parsed:
        if event.dedup_key in seen:
            duplicates += 1
            continue
        seen.add(event.dedup_key)
        merged.append(event)
    return EventMergeResult(
        merged=merged,
        added=len(merged) - len(existing),
        duplicates=duplicates,
    )


def apply_name_resolution(
    events: Iterable[TripEvent],
    name: str,
    identity_key: str,
    *,
    now: datetime | None = None,
) -> list[TripEvent]:
    """Attach ``identity_key`` to the still-unresolved events carrying ``name``."""

    stamp = now or utcnow()
    return [
        replace(event, identity_key=identity_key, updated_at=stamp)
        if event.name == name and event.identity_key is None
        else event
        for event in events
    ]


def refresh_event_statuses(events: Iterable[TripEvent], on: date) -> list[TripEvent]:
    refreshed: list[TripEvent] = []
    for event in events:
        status = derive_event_status(event.start_date, event.end_date, on)
        refreshed.append(event if status == event.status else replace(event, status=status))
    return refreshed
