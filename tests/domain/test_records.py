from __future__ import annotations

import pytest

from rosterpy.domain.model import RecordLayout
from rosterpy.domain.records import (
    RecordParseResult,
    drop_records,
    merge_records,
    parse_records,
    positional_layout,
)
from tests.support.factories import FIXED_NOW, REFERENCE_DATE, make_record, tsv

FULL_ROW = ("kang.bh", "강병훈", "설비그룹", "A파트", "SDV", "01-12", "02-03", "라인 셋업")


def test_headerless_full_row_uses_fixed_positions() -> None:
    result = parse_records(tsv(FULL_ROW), reference_date=REFERENCE_DATE, now=FIXED_NOW)

    assert result.errors == []
    assert result.headers is None
    assert result.max_columns == 8
    record = result.records[0]
    assert record.identity_key == "kang.bh"
    assert record.name == "강병훈"
    assert record.group == "설비그룹"
    assert record.part == "A파트"
    assert record.destination == "SDV"
    assert (record.start_date, record.end_date) == ("2026-01-12", "2026-02-03")
    assert record.purpose == "라인 셋업"
    assert record.raw_data == FULL_ROW
    assert record.created_at == FIXED_NOW


def test_headerless_seven_column_row_has_no_identity() -> None:
    record = parse_records(tsv(FULL_ROW[1:]), reference_date=REFERENCE_DATE).records[0]

    assert record.identity_key == ""
    assert record.name == "강병훈"
    assert record.destination == "SDV"
    assert record.purpose == "라인 셋업"


def test_short_row_only_yields_name() -> None:
    record = parse_records(tsv(("강병훈", "SDV", "01-12")), reference_date=REFERENCE_DATE).records[0]

    assert record.name == "강병훈"
    assert record.destination == ""
    assert record.start_date == ""
    assert record.raw_data == ("강병훈", "SDV", "01-12")


def test_positional_layout() -> None:
    assert positional_layout(9)["purpose"] == 7
    assert positional_layout(7)["name"] == 0
    assert "identity_key" not in positional_layout(7)
    assert positional_layout(2) == {"name": 0}
    assert positional_layout(0) == {}


def test_header_row_is_detected_on_first_line() -> None:
    header = ("Knox ID", "이름", "출장지", "출발", "도착", "출장목적", "비고")
    text = tsv(
        header,
        ("kang.bh", "강병훈", "SDV", "12-29", "01-05", "셋업", "메모"),
        ("lee.sj", "이수진", "SEMV", "2026-01-10", "2026-01-20", "감사"),
    )

    result = parse_records(text, reference_date=REFERENCE_DATE)

    assert result.headers == header
    assert result.max_columns == 7
    kang, lee = result.records
    assert kang.identity_key == "kang.bh"
    assert (kang.start_date, kang.end_date) == ("2025-12-29", "2026-01-05")
    assert kang.raw_data[-1] == "메모"
    assert lee.destination == "SEMV"
    assert lee.purpose == "감사"


def test_english_headers() -> None:
    text = tsv(
        ("Name", "Country", "Start Date", "End Date", "Purpose"),
        ("강병훈", "Vietnam", "2026-01-12", "2026-02-03", "Setup"),
    )

    record = parse_records(text, reference_date=REFERENCE_DATE).records[0]

    assert record.destination == "Vietnam"
    assert (record.start_date, record.end_date) == ("2026-01-12", "2026-02-03")
    assert record.purpose == "Setup"


def test_delimiter_only_row_is_reported_and_others_kept() -> None:
    text = "\n".join([",".join(FULL_ROW), ",,,,", ",".join(FULL_ROW)])

    result = parse_records(text, reference_date=REFERENCE_DATE, delimiter=",")

    assert [record.name for record in result.records] == ["강병훈", "강병훈"]
    assert result.errors == ["Line 2: Parse error"]
    assert result.max_columns == 8


@pytest.mark.parametrize("purpose", ["Line restart", "Knox 계정 점검", "startup audit"])
def test_headerless_first_row_with_keyword_purpose_is_kept(purpose: str) -> None:
    first = (*FULL_ROW[:7], purpose)
    second = ("lee.sj", "이수진", "설비그룹", "A파트", "SEMV", "01-10", "01-20", "Audit")

    result = parse_records(tsv(first, second), reference_date=REFERENCE_DATE)

    assert result.headers is None
    assert result.errors == []
    kang, lee = result.records
    assert kang.raw_data == first
    assert kang.purpose == purpose
    assert kang.identity_key == "kang.bh"
    assert lee.name == "이수진"
    assert lee.destination == "SEMV"
    assert (lee.start_date, lee.end_date) == ("2026-01-10", "2026-01-20")


def test_parse_records_empty_text() -> None:
    result = parse_records("", reference_date=REFERENCE_DATE)

    assert result == RecordParseResult()


def test_merge_records_appends_and_widens_layout() -> None:
    stored = [make_record()]
    parsed = RecordParseResult(records=[make_record("이수진")], max_columns=9)

    result = merge_records(stored, parsed, layout=RecordLayout(max_columns=8, headers=("a",)))

    assert [record.name for record in result.merged] == ["강병훈", "이수진"]
    assert result.added == 1
    assert result.layout == RecordLayout(max_columns=9, headers=("a",))


def test_merge_records_keeps_wider_stored_layout_and_new_headers() -> None:
    parsed = RecordParseResult(max_columns=5, headers=("이름", "출장지"))

    result = merge_records([], parsed, layout=RecordLayout(max_columns=8))

    assert result.layout == RecordLayout(max_columns=8, headers=("이름", "출장지"))


def test_drop_records() -> None:
    keep = make_record(record_id="keep")
    gone = make_record(record_id="gone")

    assert drop_records([keep, gone], ["gone", "missing"]) == [keep]
