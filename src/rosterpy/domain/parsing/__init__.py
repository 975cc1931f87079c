"""Text decoding shared by the roster, event and record importers."""

from __future__ import annotations

from .dates import (
    format_short_date,
    intervals_overlap,
    normalize_date,
    normalize_date_range,
    parse_iso_date,
)
from .rows import (
    DEFAULT_DELIMITER,
    CustomColumn,
    HeaderMapping,
    HeaderRule,
    HeaderVocabulary,
    Row,
    decode_lines,
    decode_rows,
    detect_header,
    normalize_header,
    positional_columns,
    split_cells,
)

__all__ = [
    "DEFAULT_DELIMITER",
    "CustomColumn",
    "HeaderMapping",
    "HeaderRule",
    "HeaderVocabulary",
    "Row",
    "decode_lines",
    "decode_rows",
    "detect_header",
    "format_short_date",
    "intervals_overlap",
    "normalize_date",
    "normalize_date_range",
    "normalize_header",
    "parse_iso_date",
    "positional_columns",
    "split_cells",
]
