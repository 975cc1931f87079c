from __future__ import annotations

import pytest

from rosterpy.domain.errors import MemberEditError
from rosterpy.domain.model import MemberStatus
from rosterpy.domain.roster_import import (
    derive_member_status,
    edit_member,
    merge_custom_headers,
    merge_member,
    merge_roster,
    parse_int,
    parse_roster,
    replace_roster,
)
from tests.support.factories import FIXED_NOW, LATER, make_member, tsv

HEADER = ("Knox ID", "이름", "사번", "부서", "직급", "직급연차", "출생년도", "비고")


def test_parse_roster_header_mode() -> None:
    text = tsv(
        HEADER,
        ("kang.bh", "강병훈", "1001", "생산기술팀", "책임", "5년", "1985", "야간"),
        ("lee.sj", "이수진", "1002", "품질팀", "선임", "", "", ""),
    )

    result = parse_roster(text, now=FIXED_NOW)

    assert result.total_rows == 2
    assert result.parsed_rows == 2
    assert result.skipped_rows == 0
    assert result.headers == HEADER
    assert result.custom_headers == ("비고",)

    first, second = result.members
    assert first.id == first.identity_key == "kang.bh"
    assert first.employee_id == "1001"
    assert first.department == "생산기술팀"
    assert first.position == "책임"
    assert first.position_year == 5
    assert first.birth_year == 1985
    assert first.status is MemberStatus.ACTIVE
    assert first.custom_fields == {"비고": "야간"}
    assert first.created_at == first.updated_at == FIXED_NOW
    assert second.position_year == 0
    assert second.custom_fields == {}


def test_parse_roster_identity_key_fallbacks() -> None:
    text = tsv(
        ("Knox ID", "이름", "사번"),
        ("", "강병훈", "1001"),
        ("", "이수진", ""),
    )

    members = parse_roster(text).members

    assert [member.identity_key for member in members] == ["1001", "member-2"]
    assert [member.id for member in members] == ["1001", "member-2"]


def test_parse_roster_skips_rows_without_name() -> None:
    text = tsv(
        ("Knox ID", "이름"),
        ("kang.bh", "강병훈"),
        ("ghost", ""),
    )

    result = parse_roster(text)

    assert result.total_rows == 2
    assert result.parsed_rows == 1
    assert result.skipped_rows == 1


def test_parse_roster_positional_mode_collects_overflow_columns() -> None:
    row = (
        "kang.bh",
        "강병훈",
        "1001",
        "생산기술팀",
        "설비그룹",
        "A파트",
        "증착",
        "책임",
        "5",
        "1985",
        "기흥",
        "야간",
    )

    result = parse_roster(tsv(row))

    assert result.headers == ()
    assert result.custom_headers == ("column_12",)
    member = result.members[0]
    assert member.identity_key == "kang.bh"
    assert member.group == "설비그룹"
    assert member.part == "A파트"
    assert member.process_type == "증착"
    assert member.work_location == "기흥"
    assert member.custom_fields == {"column_12": "야간"}


def test_parse_roster_short_positional_row() -> None:
    member = parse_roster(tsv(("kang.bh", "강병훈"))).members[0]

    assert member.name == "강병훈"
    assert member.department == ""


def test_parse_roster_empty_text() -> None:
    result = parse_roster("  \n\n")

    assert result.members == []
    assert result.total_rows == 0


@pytest.mark.parametrize(
    ("department", "expected"),
    [
        ("생산기술팀", MemberStatus.ACTIVE),
        ("생산기술팀(휴직)", MemberStatus.LEAVE),
        ("Leave of absence", MemberStatus.LEAVE),
        ("퇴직", MemberStatus.RESIGNED),
        ("Resigned", MemberStatus.RESIGNED),
        ("미국 주재원", MemberStatus.EXPATRIATE),
        ("Expat", MemberStatus.EXPATRIATE),
        ("휴직 주재원", MemberStatus.LEAVE),
    ],
)
def test_derive_member_status(department: str, expected: MemberStatus) -> None:
    assert derive_member_status(department) is expected


def test_parse_int() -> None:
    assert parse_int("5년") == 5
    assert parse_int(" 12 ") == 12
    assert parse_int("n/a") == 0
    assert parse_int("") == 0


def test_merge_member_blank_never_erases() -> None:
    current = make_member(
        position="책임",
        birth_year=1985,
        custom_fields={"비고": "야간", "메모": "a"},
    )
    incoming = make_member(
        department="생산기술팀(휴직)",
        status=MemberStatus.LEAVE,
        custom_fields={"메모": "b"},
    )

    merged = merge_member(current, incoming, now=LATER)

    assert merged.position == "책임"
    assert merged.birth_year == 1985
    assert merged.department == "생산기술팀(휴직)"
    assert merged.status is MemberStatus.LEAVE
    assert merged.custom_fields == {"비고": "야간", "메모": "b"}
    assert merged.id == current.id
    assert merged.created_at == FIXED_NOW
    assert merged.updated_at == LATER


def test_merge_member_replaces_status_even_back_to_active() -> None:
    current = make_member(status=MemberStatus.LEAVE)

    merged = merge_member(current, make_member(), now=LATER)

    assert merged.status is MemberStatus.ACTIVE


def test_merge_roster_counts_added_updated_unchanged() -> None:
    kang = make_member("강병훈", position="책임")
    lee = make_member("이수진")
    incoming = [make_member("강병훈", position=""), make_member("박민수")]

    result = merge_roster([kang, lee], incoming, now=LATER)

    assert (result.added, result.updated, result.unchanged) == (1, 1, 1)
    assert [member.name for member in result.merged] == ["강병훈", "박민수", "이수진"]
    assert result.merged[0].position == "책임"
    assert result.merged[2] is lee


def test_merge_roster_reimport_updates_every_row() -> None:
    text = tsv(
        ("Knox ID", "이름", "부서"),
        ("kang.bh", "강병훈", "생산기술팀"),
        ("lee.sj", "이수진", "품질팀"),
    )
    first = parse_roster(text, now=FIXED_NOW)
    stored = merge_roster([], first.members, now=FIXED_NOW).merged

    second = parse_roster(text, now=LATER)
    result = merge_roster(stored, second.members, now=LATER)

    assert result.added == 0
    assert result.updated == second.parsed_rows
    assert len(result.merged) == len(stored)


def test_merge_roster_folds_duplicate_keys_within_batch() -> None:
    incoming = [
        make_member("강병훈", identity_key="kang.bh", position="책임"),
        make_member("강병훈", identity_key="kang.bh", position="", birth_year=1985),
    ]

    result = merge_roster([], incoming, now=LATER)

    assert len(result.merged) == 1
    assert result.added == 1
    assert result.updated == 1
    assert result.merged[0].position == "책임"
    assert result.merged[0].birth_year == 1985


def test_replace_roster_discards_existing_members() -> None:
    result = replace_roster([make_member("박민수")])

    assert [member.name for member in result.merged] == ["박민수"]
    assert result.added == 1
    assert result.unchanged == 0


def test_merge_custom_headers_keeps_first_seen_order() -> None:
    assert merge_custom_headers(("비고", "메모"), ("메모", "야간")) == ("비고", "메모", "야간")


def test_edit_member_clears_fields_and_coerces_values() -> None:
    member = make_member(position="책임", birth_year=1985)

    edited = edit_member(
        member,
        now=LATER,
        position="",
        birth_year="1990",
        status="휴직",
        custom_fields={"비고": 3},
    )

    assert edited.position == ""
    assert edited.birth_year == 1990
    assert edited.status is MemberStatus.LEAVE
    assert edited.custom_fields == {"비고": "3"}
    assert edited.updated_at == LATER


@pytest.mark.parametrize(
    "changes",
    [
        {"identity_key": "other"},
        {"created_at": LATER},
        {"nickname": "bh"},
        {"status": "on vacation"},
        {"name": ""},
        {"custom_fields": ["not", "a", "mapping"]},
    ],
)
def test_edit_member_rejects_invalid_changes(changes: dict[str, object]) -> None:
    with pytest.raises(MemberEditError):
        edit_member(make_member(), **changes)
