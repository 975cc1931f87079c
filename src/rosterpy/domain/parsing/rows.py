"""Split pasted text into rows and cells and detect an optional header row.

Every importer shares this decoder. A header row is recognised by matching its
cells against a :class:`HeaderVocabulary` after normalising them (lower case,
whitespace and underscores removed), so ``Knox_ID``, ``knox id`` and ``KNOXID``
all land on the same field. Header cells the vocabulary does not know become
:class:`CustomColumn` entries, which lets new export columns flow into the
extension map without code changes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

DEFAULT_DELIMITER: Final[str] = "\t"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_HEADER_NOISE = re.compile(r"[\s_]+")


@dataclass(frozen=True, slots=True)
class Row:
    """One non-blank input line; ``line_number`` is 1-based and physical."""

    line_number: int
    cells: tuple[str, ...]

    def cell(self, index: int | None) -> str:
        if index is None or index >= len(self.cells):
            return ""
        return self.cells[index]


@dataclass(frozen=True, slots=True, kw_only=True)
class HeaderRule:
    """Header tokens mapping to one field, either exactly or by substring."""

    field: str
    exact: frozenset[str] = frozenset()
    contains: tuple[str, ...] = ()

    def matches(self, token: str) -> bool:
        if token in self.exact:
            return True
        return any(fragment in token for fragment in self.contains)


@dataclass(frozen=True, slots=True)
class HeaderVocabulary:
    """Ordered header rules; the first matching rule claims a cell.

    A row counts as a header only when one of its normalised cells equals a
    ``detection_tokens`` entry. Substring rules never make a row a header; they
    only map columns once a header has been found.
    """

    rules: tuple[HeaderRule, ...]
    detection_tokens: frozenset[str]

    def field_for(self, token: str) -> str | None:
        for rule in self.rules:
            if rule.matches(token):
                return rule.field
        return None


@dataclass(frozen=True, slots=True)
class CustomColumn:
    index: int
    label: str


@dataclass(frozen=True, slots=True)
class HeaderMapping:
    """Column layout derived from a detected header row."""

    headers: tuple[str, ...]
    field_columns: dict[str, int] = field(default_factory=dict)
    custom_columns: tuple[CustomColumn, ...] = ()

    def column(self, field_name: str) -> int | None:
        return self.field_columns.get(field_name)


def normalize_header(value: str) -> str:
    return _HEADER_NOISE.sub("", value).lower()


def split_cells(line: str, *, delimiter: str = DEFAULT_DELIMITER) -> tuple[str, ...]:
    return tuple(cell.strip() for cell in line.split(delimiter))


def decode_rows(text: str, *, delimiter: str = DEFAULT_DELIMITER) -> list[Row]:
    """Split ``text`` into non-blank rows of trimmed cells."""

    rows: list[Row] = []
    for line_number, line in enumerate(_LINE_BREAK.split(text), start=1):
        if not line.strip():
            continue
        rows.append(Row(line_number=line_number, cells=split_cells(line, delimiter=delimiter)))
    return rows


def decode_lines(text: str) -> list[tuple[int, str]]:
    """Return ``(line_number, trimmed_line)`` pairs for every non-blank line."""

    return [
        (line_number, line.strip())
        for line_number, line in enumerate(_LINE_BREAK.split(text), start=1)
        if line.strip()
    ]


def detect_header(cells: Sequence[str], vocabulary: HeaderVocabulary) -> HeaderMapping | None:
    """Return a mapping when ``cells`` look like a header row, else ``None``."""

    tokens = [normalize_header(cell) for cell in cells]
    if vocabulary.detection_tokens.isdisjoint(tokens):
        return None

    fields = [vocabulary.field_for(token) for token in tokens]
    field_columns: dict[str, int] = {}
    unknown: list[tuple[int, str]] = []
    for index, (cell, name) in enumerate(zip(cells, fields, strict=True)):
        if name is None:
            unknown.append((index, cell))
        elif name not in field_columns:
            field_columns[name] = index
    return HeaderMapping(
        headers=tuple(cells),
        field_columns=field_columns,
        custom_columns=tuple(_label_custom_columns(unknown)),
    )


def positional_columns(fields: Sequence[str], column_count: int) -> dict[str, int]:
    """Map the first ``column_count`` positions of a fixed layout to their fields."""

    return {name: index for index, name in enumerate(fields[:column_count])}


def _label_custom_columns(columns: Iterable[tuple[int, str]]) -> list[CustomColumn]:
    seen: set[str] = set()
    labelled: list[CustomColumn] = []
    for index, header in columns:
        label = header or f"column_{index + 1}"
        if label in seen:
            label = f"{label}#{index + 1}"
        seen.add(label)
        labelled.append(CustomColumn(index=index, label=label))
    return labelled
