"""Best-effort calendar date handling for pasted schedules and exports.

Tokens are normalised to ISO ``YYYY-MM-DD`` strings when they can be understood
and returned untouched otherwise; nothing here raises on bad input.
"""

from __future__ import annotations

import re
from datetime import date

_MONTH_DAY = re.compile(r"^(\d{1,2})[-.](\d{1,2})$")
_FULL_DATE = re.compile(r"^(\d{4})[-./](\d{1,2})[-./](\d{1,2})$")


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _month_day(token: str) -> tuple[int, int] | None:
    match = _MONTH_DAY.match(token)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def normalize_date(token: str, reference: date) -> str:
    """Normalise one date token, giving ``MM-DD`` the reference year.

    Full ``YYYY-M-D`` dates are zero-padded (``2025-1-5`` becomes ``2025-01-05``),
    so an already padded ISO date comes back unchanged. Tokens that are not a
    real calendar date are returned trimmed but otherwise as given.
    """

    cleaned = token.strip()
    month_day = _month_day(cleaned)
    if month_day is not None:
        return _iso(reference.year, *month_day) or cleaned

    full = _FULL_DATE.match(cleaned)
    if full is not None:
        year, month, day = (int(part) for part in full.groups())
        return _iso(year, month, day) or cleaned

    return cleaned


def normalize_date_range(start: str, end: str, reference: date) -> tuple[str, str]:
    """Normalise a start/end pair, inferring years across a year boundary.

    ``12-29 ~ 02-12`` read on 2026-02-11 is a span that started last year, so the
    start month exceeding the end month moves the start into the previous year.
    """

    start_md = _month_day(start.strip())
    end_md = _month_day(end.strip())
    if start_md is not None and end_md is not None and start_md[0] > end_md[0]:
        previous = reference.replace(year=reference.year - 1, month=1, day=1)
        return normalize_date(start, previous), normalize_date(end, reference)
    return normalize_date(start, reference), normalize_date(end, reference)


def parse_iso_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def intervals_overlap(
    start_a: str,
    end_a: str,
    start_b: str,
    end_b: str,
) -> bool:
    """Inclusive overlap test; an unparseable bound never overlaps."""

    bounds = [parse_iso_date(value) for value in (start_a, end_a, start_b, end_b)]
    a0, a1, b0, b1 = bounds
    if a0 is None or a1 is None or b0 is None or b1 is None:
        return False
    return a0 <= b1 and a1 >= b0


def format_short_date(value: str) -> str:
    """Render ``YYYY-MM-DD`` as unpadded ``M/D``; other values pass through."""

    if not value:
        return ""
    parts = value.split("-")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):  # noqa: PLR2004
        return value
    return f"{int(parts[1])}/{int(parts[2])}"
