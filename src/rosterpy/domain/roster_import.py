"""Parse pasted HR roster text and merge it into the stored roster.

Import is additive: members missing from a batch are carried over untouched, and
an incoming blank or zero value never erases what is already stored. The only
field an import replaces outright is ``status``, which is derived from the
department text and therefore authoritative for the batch it came from.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

from rosterpy.domain.errors import MemberEditError
from rosterpy.domain.model import (
    NUMERIC_FIELDS,
    ORGANIZATIONAL_FIELDS,
    MemberStatus,
    RosterMember,
    utcnow,
)
from rosterpy.domain.parsing import (
    DEFAULT_DELIMITER,
    CustomColumn,
    HeaderRule,
    HeaderVocabulary,
    Row,
    decode_rows,
    detect_header,
    positional_columns,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

log = logging.getLogger(__name__)

ROSTER_VOCABULARY: Final = HeaderVocabulary(
    rules=(
        HeaderRule(field="identity_key", exact=frozenset({"knoxid", "knox", "id"})),
        HeaderRule(field="name", exact=frozenset({"이름", "성명", "name"})),
        HeaderRule(field="employee_id", exact=frozenset({"사번", "employeeid", "empno"})),
        HeaderRule(field="department", exact=frozenset({"소속", "부서", "department"})),
        HeaderRule(field="group", exact=frozenset({"그룹", "공정", "group"})),
        HeaderRule(field="part", exact=frozenset({"파트", "part"})),
        HeaderRule(
            field="process_type",
            exact=frozenset({"공정/설비", "process", "processtype"}),
        ),
        HeaderRule(field="position", exact=frozenset({"직급", "position"})),
        HeaderRule(field="position_year", exact=frozenset({"직급연차", "positionyear"})),
        HeaderRule(field="birth_year", exact=frozenset({"출생년도", "birthyear"})),
        HeaderRule(
            field="work_location",
            exact=frozenset({"근무지", "worklocation", "location"}),
        ),
    ),
    detection_tokens=frozenset(
        {"knoxid", "knox", "id", "이름", "성명", "name", "사번", "employeeid", "empno"}
    ),
)

# Column order of the legacy export, used when the paste carries no header row.
ROSTER_POSITIONAL_LAYOUT: Final[tuple[str, ...]] = (
    "identity_key",
    "name",
    "employee_id",
    "department",
    "group",
    "part",
    "process_type",
    "position",
    "position_year",
    "birth_year",
    "work_location",
)

# Checked in order; the first fragment found in the department wins.
STATUS_MARKERS: Final[tuple[tuple[MemberStatus, tuple[str, ...]], ...]] = (
    (MemberStatus.LEAVE, ("휴직", "leave")),
    (MemberStatus.RESIGNED, ("퇴직", "resign")),
    (MemberStatus.EXPATRIATE, ("주재원", "expat")),
)

_LEADING_INT = re.compile(r"^[+-]?\d+")
_PROTECTED_FIELDS: Final[frozenset[str]] = frozenset(
    {"id", "identity_key", "created_at", "updated_at"}
)
_EDITABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {*ORGANIZATIONAL_FIELDS, "status", "custom_fields"}
)


@dataclass(slots=True)
class RosterParseResult:
    members: list[RosterMember] = field(default_factory=list)
    headers: tuple[str, ...] = ()
    custom_headers: tuple[str, ...] = ()
    total_rows: int = 0
    parsed_rows: int = 0
    skipped_rows: int = 0


@dataclass(slots=True)
class RosterMergeResult:
    merged: list[RosterMember]
    added: int = 0
    updated: int = 0
    unchanged: int = 0


def parse_int(value: str) -> int:
    """Integer prefix of ``value`` (``"5년"`` -> 5), or 0 when there is none."""

    match = _LEADING_INT.match(value.strip())
    return int(match.group(0)) if match else 0


def derive_member_status(department: str) -> MemberStatus:
    lowered = department.lower()
    for status, markers in STATUS_MARKERS:
        if any(marker in lowered for marker in markers):
            return status
    return MemberStatus.ACTIVE


def parse_roster(
    text: str,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    now: datetime | None = None,
) -> RosterParseResult:
    """Decode roster rows into members, counting parsed and skipped rows."""

    rows = decode_rows(text, delimiter=delimiter)
    if not rows:
        return RosterParseResult()

    mapping = detect_header(rows[0].cells, ROSTER_VOCABULARY)
    data_rows = rows[1:] if mapping is not None else rows
    stamp = now or utcnow()

    members: list[RosterMember] = []
    custom_labels: list[str] = (
        [column.label for column in mapping.custom_columns] if mapping is not None else []
    )
    skipped = 0
    for row_number, row in enumerate(data_rows, start=1):
        if mapping is not None:
            columns = mapping.field_columns
            custom_columns = mapping.custom_columns
        else:
            columns = positional_columns(ROSTER_POSITIONAL_LAYOUT, len(row.cells))
            custom_columns = _overflow_columns(row, len(ROSTER_POSITIONAL_LAYOUT))
            custom_labels.extend(
                column.label for column in custom_columns if column.label not in custom_labels
            )

        member = _build_member(row, columns, custom_columns, row_number=row_number, stamp=stamp)
        if member is None:
            log.debug("Skipping roster line %s: no name", row.line_number)
            skipped += 1
            continue
        members.append(member)

    result = RosterParseResult(
        members=members,
        headers=mapping.headers if mapping is not None else (),
        custom_headers=tuple(custom_labels),
        total_rows=len(data_rows),
        parsed_rows=len(members),
        skipped_rows=skipped,
    )
    log.info(
        "Parsed roster: total=%s, parsed=%s, skipped=%s, header=%s",
        result.total_rows,
        result.parsed_rows,
        result.skipped_rows,
        mapping is not None,
    )
    return result


def _overflow_columns(row: Row, layout_width: int) -> tuple[CustomColumn, ...]:
    return tuple(
        CustomColumn(index=index, label=f"column_{index + 1}")
        for index in range(layout_width, len(row.cells))
    )


def _build_member(
    row: Row,
    columns: dict[str, int],
    custom_columns: Sequence[CustomColumn],
    *,
    row_number: int,
    stamp: datetime,
) -> RosterMember | None:
    values = {name: row.cell(index) for name, index in columns.items()}
    name = values.get("name", "")
    if not name:
        return None

    custom_fields = {
        column.label: row.cell(column.index)
        for column in custom_columns
        if row.cell(column.index)
    }
    department = values.get("department", "")
    employee_id = values.get("employee_id", "")
    identity_key = values.get("identity_key", "") or employee_id or f"member-{row_number}"
    return RosterMember(
        id=identity_key,
        identity_key=identity_key,
        name=name,
        employee_id=employee_id,
        department=department,
        group=values.get("group", ""),
        part=values.get("part", ""),
        process_type=values.get("process_type", ""),
        position=values.get("position", ""),
        position_year=parse_int(values.get("position_year", "")),
        birth_year=parse_int(values.get("birth_year", "")),
        work_location=values.get("work_location", ""),
        status=derive_member_status(department),
        custom_fields=custom_fields,
        created_at=stamp,
        updated_at=stamp,
    )


def merge_roster(
    existing: Sequence[RosterMember],
    parsed: Sequence[RosterMember],
    *,
    now: datetime | None = None,
) -> RosterMergeResult:
    """Merge a parsed batch into ``existing`` keyed by identity key."""

    stamp = now or utcnow()
    lookup: dict[str, RosterMember] = {}
    for member in existing:
        lookup.setdefault(member.identity_key, member)

    merged: list[RosterMember] = []
    position_by_key: dict[str, int] = {}
    consumed: set[str] = set()
    added = 0
    updated = 0

    for incoming in parsed:
        key = incoming.identity_key
        if key in position_by_key:
            index = position_by_key[key]
            merged[index] = merge_member(merged[index], incoming, now=stamp)
            updated += 1
            continue

        current = lookup.get(key)
        if current is None:
            merged.append(incoming)
            added += 1
        else:
            merged.append(merge_member(current, incoming, now=stamp))
            consumed.add(key)
            updated += 1
        position_by_key[key] = len(merged) - 1

    carried = [
        member
        for member in existing
        if not (member.identity_key in consumed and lookup[member.identity_key] is member)
    ]
    merged.extend(carried)

    log.info(
        "Merged roster: added=%s, updated=%s, unchanged=%s", added, updated, len(carried)
    )
    return RosterMergeResult(merged=merged, added=added, updated=updated, unchanged=len(carried))


def merge_member(
    current: RosterMember,
    incoming: RosterMember,
    *,
    now: datetime | None = None,
) -> RosterMember:
    """Field-level merge: keep ``current`` wherever ``incoming`` is blank or zero."""

    changes: dict[str, object] = {
        name: _prefer(getattr(incoming, name), getattr(current, name))
        for name in ORGANIZATIONAL_FIELDS
    }
    return replace(
        current,
        **changes,
        identity_key=incoming.identity_key or current.identity_key,
        status=incoming.status,
        custom_fields={**current.custom_fields, **incoming.custom_fields},
        updated_at=now or utcnow(),
    )


def _prefer[TValue: (str, int)](incoming: TValue, current: TValue) -> TValue:
    return incoming if incoming else current


def replace_roster(parsed: Sequence[RosterMember]) -> RosterMergeResult:
    """Overwrite mode: the parsed batch becomes the roster."""

    return merge_roster((), parsed)


def merge_custom_headers(known: Iterable[str], incoming: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys([*known, *incoming]))


def edit_member(
    member: RosterMember,
    *,
    now: datetime | None = None,
    **changes: object,
) -> RosterMember:
    """Apply an explicit user edit; unlike imports, blank values do clear fields."""

    protected = sorted(set(changes) & _PROTECTED_FIELDS)
    if protected:
        raise MemberEditError(f"Fields cannot be edited: {', '.join(protected)}")
    unknown = sorted(set(changes) - _EDITABLE_FIELDS)
    if unknown:
        raise MemberEditError(f"Unknown roster fields: {', '.join(unknown)}")

    coerced: dict[str, object] = {}
    for name, value in changes.items():
        if name in NUMERIC_FIELDS:
            coerced[name] = value if isinstance(value, int) else parse_int(str(value))
        elif name == "status":
            try:
                coerced[name] = MemberStatus(value)
            except ValueError as exc:
                raise MemberEditError(f"Invalid member status: {value}") from exc
        elif name == "custom_fields":
            if not isinstance(value, dict):
                raise MemberEditError("custom_fields must be a mapping")
            coerced[name] = {str(key): str(item) for key, item in value.items()}
        else:
            coerced[name] = str(value).strip()
    if coerced.get("name", member.name) == "":
        raise MemberEditError("A roster member must keep a name")
    return replace(member, **coerced, updated_at=now or utcnow())
