"""Shared logging helpers for rosterpy."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once for command line output.

    Defaults to INFO with a terse timestamped format. Pass ``force=True`` to
    reconfigure during tests or when ``--verbose`` is requested after startup.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
