"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
import sys
from typing import IO


def configure_logging(
    *,
    verbose: bool = False,
    stream: IO[str] | None = None,
    force: bool = False,
) -> None:
    """Initialise the root logger.

    Log lines go to ``stream`` (stderr by default) because stdout carries the
    JSON-lines event stream. ``verbose`` lowers the level to DEBUG, which
    traces every applied change.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=stream or sys.stderr,
        force=force,
    )
