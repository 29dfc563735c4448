#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogsync.app import purge_items
from catalogsync.config import ConfigurationError, configure_logging
from catalogsync.domain.errors import CatalogSyncError
from catalogsync.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {parsed}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete catalog items matching a filter")
    parser.add_argument(
        "--kind",
        required=True,
        choices=[kind.value for kind in EntityKind],
        help="Kind of items to delete",
    )
    parser.add_argument(
        "--filter",
        default="",
        help="SensorThings $filter expression selecting the items (default: all)",
    )
    parser.add_argument(
        "--parallelism",
        type=_positive_int,
        help="Number of concurrent deletes (default: CATALOG_DELETE_PARALLELISM)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Only count the matching items",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Purge entry point."""
    # argparse exits with 2 on usage errors
    parsed_args = _parse_args(argv if argv is not None else sys.argv[1:])

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        result = purge_items(
            EntityKind(parsed_args.kind),
            parsed_args.filter,
            parallelism=parsed_args.parallelism,
            dry_run=parsed_args.dry_run,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except CatalogSyncError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if result.dry_run:
        print(f"{result.matched} {parsed_args.kind} items would be deleted")
    else:
        print(f"Deleted {result.deleted} of {result.matched} {parsed_args.kind} items")
    if result.deleted < result.matched and not result.dry_run:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
