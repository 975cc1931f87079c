"""Parse tabular trip/attendance exports into trip records.

Each row is handled on its own: a row that fails extraction is reported with its
line number and left out, and the rest of the batch still imports. Whatever the
mapping manages to extract, ``raw_data`` keeps the row's cells verbatim so the
original table can always be shown as pasted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from rosterpy.domain.errors import RecordExtractionError
from rosterpy.domain.model import RecordLayout, TripRecord, today, utcnow
from rosterpy.domain.parsing import (
    DEFAULT_DELIMITER,
    HeaderMapping,
    HeaderRule,
    HeaderVocabulary,
    Row,
    decode_rows,
    detect_header,
    normalize_date_range,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date, datetime

log = logging.getLogger(__name__)

RECORD_VOCABULARY: Final = HeaderVocabulary(
    rules=(
        HeaderRule(field="identity_key", contains=("knox",)),
        HeaderRule(field="name", exact=frozenset({"이름", "name"})),
        HeaderRule(field="group", exact=frozenset({"그룹", "group"})),
        HeaderRule(field="part", exact=frozenset({"파트", "part"})),
        HeaderRule(
            field="destination",
            exact=frozenset({"출장지", "국가", "도시", "destination", "country", "city"}),
        ),
        HeaderRule(field="start_date", exact=frozenset({"출발"}), contains=("start",)),
        HeaderRule(field="end_date", exact=frozenset({"도착"}), contains=("end",)),
        HeaderRule(field="purpose", exact=frozenset({"출장목적", "목적", "purpose"})),
    ),
    detection_tokens=frozenset({"이름", "knoxid", "출발", "name", "startdate"}),
)

FULL_LAYOUT: Final[tuple[str, ...]] = (
    "identity_key",
    "name",
    "group",
    "part",
    "destination",
    "start_date",
    "end_date",
    "purpose",
)
# Same export with the identity column dropped.
NO_IDENTITY_LAYOUT: Final[tuple[str, ...]] = FULL_LAYOUT[1:]


@dataclass(slots=True)
class RecordParseResult:
    records: list[TripRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    max_columns: int = 0
    headers: tuple[str, ...] | None = None


@dataclass(slots=True)
class RecordMergeResult:
    merged: list[TripRecord]
    layout: RecordLayout
    added: int = 0


def positional_layout(column_count: int) -> dict[str, int]:
    """Fixed column positions for a headerless row of ``column_count`` cells."""

    if column_count >= len(FULL_LAYOUT):
        return {name: index for index, name in enumerate(FULL_LAYOUT)}
    if column_count == len(NO_IDENTITY_LAYOUT):
        return {name: index for index, name in enumerate(NO_IDENTITY_LAYOUT)}
    if column_count > 0:
        return {"name": 0}
    return {}


def parse_records(
    text: str,
    *,
    reference_date: date | None = None,
    delimiter: str = DEFAULT_DELIMITER,
    now: datetime | None = None,
) -> RecordParseResult:
    """Decode export rows into records, collecting per-line errors."""

    reference = reference_date or today()
    stamp = now or utcnow()
    rows = decode_rows(text, delimiter=delimiter)
    result = RecordParseResult(max_columns=max((len(row.cells) for row in rows), default=0))

    mapping = detect_header(rows[0].cells, RECORD_VOCABULARY) if rows else None
    if mapping is not None:
        result.headers = mapping.headers
        rows = rows[1:]

    for row in rows:
        try:
            record = extract_record(row, mapping, reference=reference, stamp=stamp)
        except RecordExtractionError as exc:
            log.warning("Failed to parse record on line %s: %s", row.line_number, exc)
            result.errors.append(f"Line {row.line_number}: Parse error")
            continue
        result.records.append(record)

    log.info(
        "Parsed records: records=%s, errors=%s, max_columns=%s, header=%s",
        len(result.records),
        len(result.errors),
        result.max_columns,
        mapping is not None,
    )
    return result


def extract_record(
    row: Row,
    mapping: HeaderMapping | None,
    *,
    reference: date,
    stamp: datetime,
) -> TripRecord:
    """Build one record from ``row``; rows made only of delimiters are rejected."""

    if not any(row.cells):
        raise RecordExtractionError(f"Row has {len(row.cells)} empty cells")
    columns = mapping.field_columns if mapping is not None else positional_layout(len(row.cells))
    values = {name: row.cell(index) for name, index in columns.items()}
    start_date, end_date = normalize_date_range(
        values.get("start_date", ""),
        values.get("end_date", ""),
        reference,
    )
    return TripRecord(
        identity_key=values.get("identity_key", ""),
        name=values.get("name", ""),
        group=values.get("group", ""),
        part=values.get("part", ""),
        destination=values.get("destination", ""),
        start_date=start_date,
        end_date=end_date,
        purpose=values.get("purpose", ""),
        raw_data=row.cells,
        created_at=stamp,
        updated_at=stamp,
    )


def merge_records(
    existing: Sequence[TripRecord],
    parsed: RecordParseResult,
    *,
    layout: RecordLayout | None = None,
) -> RecordMergeResult:
    """Append an import to the stored records and widen the remembered layout."""

    current = layout or RecordLayout()
    merged_layout = RecordLayout(
        max_columns=max(current.max_columns, parsed.max_columns),
        headers=parsed.headers if parsed.headers is not None else current.headers,
    )
    merged = [*existing, *parsed.records]
    return RecordMergeResult(merged=merged, layout=merged_layout, added=len(parsed.records))


def drop_records(records: Iterable[TripRecord], record_ids: Iterable[str]) -> list[TripRecord]:
    doomed = set(record_ids)
    return [record for record in records if record.id not in doomed]
