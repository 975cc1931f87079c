from __future__ import annotations

import pytest

from rosterpy.domain.destinations import (
    DestinationMatch,
    DestinationResult,
    build_display_label,
    choose_destination,
    prune_destination_resolutions,
    resolve_destination,
    resolve_destinations,
)
from rosterpy.domain.errors import UnknownEntityError
from tests.support.factories import make_event, make_record


def _match() -> DestinationMatch:
    return DestinationMatch.from_record(make_record())


def test_single_overlapping_record_matches() -> None:
    event = make_event()
    record = make_record(identity_key="kang.bh")

    result = resolve_destination(event, [record, make_record("이수진")], {})

    assert result.match == DestinationMatch.from_record(record)
    assert result.match is not None
    assert result.match.identity_key == "kang.bh"
    assert not result.needs_user_choice
    assert result.candidates == (result.match,)


def test_non_overlapping_record_is_ignored() -> None:
    event = make_event(start_date="2026-03-01", end_date="2026-03-05")

    assert resolve_destination(event, [make_record()], {}) == DestinationResult()


def test_records_without_destination_are_not_candidates() -> None:
    result = resolve_destination(make_event(), [make_record(destination="")], {})

    assert result.match is None
    assert result.candidates == ()


def test_several_candidates_need_user_choice() -> None:
    first = make_record(destination="SDV")
    second = make_record(destination="SEMV", start_date="2026-02-01", end_date="2026-02-20")

    result = resolve_destination(make_event(), [first, second], {})

    assert result.match is None
    assert result.needs_user_choice
    assert [candidate.destination for candidate in result.candidates] == ["SDV", "SEMV"]


def test_saved_choice_wins() -> None:
    event = make_event()
    first = make_record(destination="SDV")
    second = make_record(destination="SEMV", start_date="2026-02-01", end_date="2026-02-20")

    result = resolve_destination(event, [first, second], {event.id: second.id})

    assert result.match == DestinationMatch.from_record(second)
    assert not result.needs_user_choice


def test_saved_choice_without_destination_falls_back_to_matching() -> None:
    event = make_event()
    blank = make_record(destination="", record_id="blank")
    real = make_record(destination="SDV")

    result = resolve_destination(event, [blank, real], {event.id: "blank"})

    assert result.match == DestinationMatch.from_record(real)


def test_saved_choice_for_deleted_record_falls_back() -> None:
    event = make_event()
    record = make_record()

    result = resolve_destination(event, [record], {event.id: "deleted"})

    assert result.match == DestinationMatch.from_record(record)


def test_incomplete_dates_fall_back_to_name_only() -> None:
    event = make_event(start_date="", end_date="")
    first = make_record(destination="SDV", start_date="2025-05-01", end_date="2025-05-03")
    second = make_record(destination="SEMV", start_date="2024-01-01", end_date="2024-01-02")

    result = resolve_destination(event, [first, second], {})

    assert result.needs_user_choice
    assert len(result.candidates) == 2


def test_record_without_dates_matches_by_name() -> None:
    record = make_record(start_date="", end_date="")

    result = resolve_destination(make_event(), [record], {})

    assert result.match == DestinationMatch.from_record(record)


def test_unparseable_dates_never_overlap() -> None:
    record = make_record(start_date="02-30", end_date="2026-02-03")

    assert resolve_destination(make_event(), [record], {}).match is None


def test_resolve_destinations_maps_each_event() -> None:
    kang = make_event("강병훈")
    lee = make_event("이수진")

    results = resolve_destinations([kang, lee], [make_record("강병훈")], {})

    assert results[kang.id].match is not None
    assert results[lee.id] == DestinationResult()


def test_display_label_replaces_parenthesised_suffix() -> None:
    assert build_display_label("해외출장(생산법인)", _match()) == "해외출장(SDV : 1/12 ~ 2/3)"


def test_display_label_appends_suffix_without_parentheses() -> None:
    assert build_display_label("출장", _match()) == "출장(SDV : 1/12 ~ 2/3)"


def test_display_label_without_match_uses_event_range() -> None:
    label = build_display_label("해외출장(생산법인)", None, "2026-01-14", "2026-02-11")

    assert label == "해외출장(1/14 ~ 2/11)"


def test_display_label_single_day_keeps_purpose() -> None:
    assert build_display_label("연차", None, "2026-01-14", "2026-01-14") == "연차"
    assert build_display_label("연차", None) == "연차"


def test_choose_destination_returns_new_mapping() -> None:
    saved = {"event-1": "record-1"}

    updated = choose_destination(saved, "event-2", "record-2")

    assert updated == {"event-1": "record-1", "event-2": "record-2"}
    assert saved == {"event-1": "record-1"}


def test_choose_destination_rejects_unknown_record() -> None:
    with pytest.raises(UnknownEntityError):
        choose_destination({}, "event-1", "missing", records=[make_record()])


def test_prune_destination_resolutions() -> None:
    event = make_event(event_id="event-1")
    record = make_record(record_id="record-1")
    saved = {"event-1": "record-1", "event-2": "record-1", "event-1b": "record-2"}

    assert prune_destination_resolutions(saved, [event], [record]) == {"event-1": "record-1"}
