#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from linktransform.app import STDIN_PATH, transform_file
from linktransform.common import configure_logging
from linktransform.config import ConfigurationError, get_transform_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Apply record-link changes to a JSON array of bibliographic records"
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=STDIN_PATH,
        help="JSON array file to transform, or '-' for stdin (default: %(default)s)",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Write JSON-lines events to this file instead of stdout",
    )
    parser.add_argument(
        "--validate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Validate every converted record (defaults to config)",
    )
    parser.add_argument(
        "--fix",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Repair empty subfields and fields before the update decision (defaults to config)",
    )
    parser.add_argument(
        "--max-in-flight",
        type=int,
        help="Maximum number of conversions running at once (defaults to unbounded)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every applied change",
    )
    args = parser.parse_args(list(argv))
    if args.max_in_flight is not None and args.max_in_flight <= 0:
        raise ValueError("--max-in-flight must be positive")
    return args


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(verbose=parsed_args.verbose)
        config = get_transform_config().with_overrides(
            validate=parsed_args.validate,
            fix=parsed_args.fix,
            max_in_flight=parsed_args.max_in_flight,
        )
    except (ValueError, ConfigurationError):
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.output:
            with open(parsed_args.output, "w", encoding="utf-8") as output:
                summary = transform_file(parsed_args.input, output=output, config=config)
        else:
            summary = transform_file(parsed_args.input, config=config)
    except Exception:
        log.exception("Fatal error during transformation")
        sys.exit(1)

    if summary.error is not None:
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
