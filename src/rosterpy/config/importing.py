"""Defaults applied when parsing pasted text."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Final

from rosterpy.domain.events import DEFAULT_EVENT_LOCATION
from rosterpy.domain.parsing import DEFAULT_DELIMITER

from .env import optional_env_var
from .errors import ConfigurationError

_DELIMITER_ALIASES: Final[dict[str, str]] = {
    "tab": "\t",
    "\\t": "\t",
    "comma": ",",
    "semicolon": ";",
    "pipe": "|",
}


@dataclass(frozen=True, slots=True)
class ImportConfig:
    delimiter: str = DEFAULT_DELIMITER
    event_location: str = DEFAULT_EVENT_LOCATION
    reference_date: date | None = None


def parse_delimiter(value: str) -> str:
    delimiter = _DELIMITER_ALIASES.get(value.lower(), value)
    if len(delimiter) != 1:
        raise ConfigurationError(f"ROSTERPY_DELIMITER must be a single character, got {value!r}")
    return delimiter


def _parse_reference_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"ROSTERPY_REFERENCE_DATE must be an ISO date (YYYY-MM-DD), got {value!r}"
        ) from exc


def get_import_config() -> ImportConfig:
    delimiter = optional_env_var("ROSTERPY_DELIMITER")
    location = optional_env_var("ROSTERPY_EVENT_LOCATION")
    reference = optional_env_var("ROSTERPY_REFERENCE_DATE")
    return ImportConfig(
        delimiter=parse_delimiter(delimiter) if delimiter else DEFAULT_DELIMITER,
        event_location=location or DEFAULT_EVENT_LOCATION,
        reference_date=_parse_reference_date(reference) if reference else None,
    )
