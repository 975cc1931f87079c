from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from rosterpy.app import (
    choose_event_destination,
    choose_event_identity,
    delete_event,
    delete_member,
    delete_record,
    import_events,
    import_records,
    import_roster,
    refresh_statuses,
    resolve_event_destinations,
)
from rosterpy.config import (
    ConfigurationError,
    ImportConfig,
    configure_logging,
    get_import_config,
    parse_delimiter,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_text_source(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        type=str,
        help="Path of the pasted text to import, or '-' to read standard input",
    )


def _add_reference_date(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--reference-date",
        type=str,
        help="ISO date (YYYY-MM-DD) used to infer the year of MM-DD dates (defaults to today)",
    )


def _add_delimiter(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--delimiter",
        type=str,
        help="Cell delimiter of the pasted table (defaults to tab)",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import HR rosters and trip schedules")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    roster = subparsers.add_parser("roster", help="Import a pasted HR roster")
    _add_text_source(roster)
    _add_delimiter(roster)
    roster.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace the stored roster instead of merging into it",
    )

    events = subparsers.add_parser("events", help="Import pasted schedule blocks")
    _add_text_source(events)
    _add_reference_date(events)
    events.add_argument(
        "--location",
        type=str,
        help="Location stored on imported events (defaults to config)",
    )

    records = subparsers.add_parser("records", help="Import a pasted trip record table")
    _add_text_source(records)
    _add_reference_date(records)
    _add_delimiter(records)

    subparsers.add_parser("destinations", help="Resolve destinations for stored events")

    refresh = subparsers.add_parser("refresh-statuses", help="Recompute stored event statuses")
    _add_reference_date(refresh)

    resolve_name = subparsers.add_parser(
        "resolve-name",
        help="Attach a roster member to every event carrying an ambiguous or unknown name",
    )
    resolve_name.add_argument("name", type=str, help="Name as it appears in the schedule")
    resolve_name.add_argument("identity_key", type=str, help="Identity key of the roster member")

    resolve_destination = subparsers.add_parser(
        "resolve-destination",
        help="Pick the trip record that supplies an event's destination",
    )
    resolve_destination.add_argument("event_id", type=str, help="Id of the trip event")
    resolve_destination.add_argument("record_id", type=str, help="Id of the trip record")

    for command, target in (
        ("delete-event", "trip event id"),
        ("delete-record", "trip record id"),
        ("delete-member", "roster identity key"),
    ):
        delete = subparsers.add_parser(command, help=f"Delete a stored entity by {target}")
        delete.add_argument("target", type=str, help=target.capitalize())

    return parser.parse_args(list(argv))


def _parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise ValueError(f"Input file not found: {source}")
    return path.read_text(encoding="utf-8-sig")


def _build_import_config(args: argparse.Namespace) -> ImportConfig:
    config = get_import_config()
    reference = getattr(args, "reference_date", None)
    delimiter = getattr(args, "delimiter", None)
    location = getattr(args, "location", None)
    if reference:
        config = replace(config, reference_date=_parse_iso_date(reference))
    if delimiter:
        config = replace(config, delimiter=parse_delimiter(delimiter))
    if location:
        config = replace(config, event_location=location)
    return config


def _report_destinations() -> None:
    for item in resolve_event_destinations():
        if item.result.needs_user_choice:
            candidates = ", ".join(
                f"{candidate.record_id}={candidate.destination}"
                for candidate in item.result.candidates
            )
            log.info("%s %s: choose one of %s", item.event.id, item.event.name, candidates)
        else:
            log.info("%s %s: %s", item.event.id, item.event.name, item.label)


def _run(args: argparse.Namespace, config: ImportConfig, text: str) -> None:  # noqa: C901
    if args.command == "roster":
        imported = import_roster(text, overwrite=args.overwrite, config=config)
        log.info(
            "Roster import: parsed=%s, skipped=%s, added=%s, updated=%s, unchanged=%s",
            imported.parse.parsed_rows,
            imported.parse.skipped_rows,
            imported.merge.added,
            imported.merge.updated,
            imported.merge.unchanged,
        )
    elif args.command == "events":
        imported_events = import_events(text, config=config)
        log.info(
            "Event import: added=%s, duplicates=%s",
            imported_events.merge.added,
            imported_events.merge.duplicates,
        )
        for name in imported_events.parse.unknown_names:
            log.warning("Name not on roster: %s", name)
        for name, candidates in imported_events.parse.ambiguous_names.items():
            log.warning(
                "Ambiguous name %s: %s",
                name,
                ", ".join(f"{member.identity_key} ({member.department})" for member in candidates),
            )
    elif args.command == "records":
        imported_records = import_records(text, config=config)
        log.info(
            "Record import: added=%s, errors=%s, columns=%s",
            imported_records.merge.added,
            len(imported_records.parse.errors),
            imported_records.merge.layout.max_columns,
        )
    elif args.command == "destinations":
        _report_destinations()
    elif args.command == "refresh-statuses":
        changed = refresh_statuses(on=config.reference_date)
        log.info("Refreshed statuses on %s event(s)", changed)
    elif args.command == "resolve-name":
        changed = choose_event_identity(args.name, args.identity_key)
        log.info("Updated %s event(s)", changed)
    elif args.command == "resolve-destination":
        choose_event_destination(args.event_id, args.record_id)
    elif args.command == "delete-event":
        deleted = delete_event(args.target)
        log.info("Deleted event; pruned %s resolution(s)", deleted.pruned_resolutions)
    elif args.command == "delete-record":
        deleted = delete_record(args.target)
        log.info("Deleted record; pruned %s resolution(s)", deleted.pruned_resolutions)
    elif args.command == "delete-member":
        deleted = delete_member(args.target)
        log.info("Deleted member; pruned %s resolution(s)", deleted.pruned_resolutions)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        config = _build_import_config(parsed_args)
        source = getattr(parsed_args, "source", None)
        text = _read_text(source) if source is not None else ""
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args, config, text)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
