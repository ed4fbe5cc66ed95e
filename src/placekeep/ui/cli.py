from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from placekeep.app import (
    clear_pending_mutations,
    list_pending_mutations,
    refresh_places,
    search_places,
    sync_pending_mutations,
)
from placekeep.config import configure_logging
from placekeep.domain.model import GeoBounds, format_distance

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_bounds_arguments(parser: argparse.ArgumentParser, *, required: bool) -> None:
    for name, help_text in (
        ("--south", "Southern latitude of the bounding box"),
        ("--west", "Western longitude of the bounding box"),
        ("--north", "Northern latitude of the bounding box"),
        ("--east", "Eastern longitude of the bounding box"),
    ):
        parser.add_argument(name, type=float, required=required, help=help_text)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the local PlaceKeep cache")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output, including HTTP requests"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("pending", help="List reviews waiting to be synced")
    subparsers.add_parser("sync", help="Replay queued reviews against the backend")

    refresh = subparsers.add_parser("refresh", help="Pull place summaries into the cache")
    _add_bounds_arguments(refresh, required=False)
    refresh.add_argument(
        "--limit",
        type=int,
        help="Maximum number of places to request",
    )

    places = subparsers.add_parser("places", help="Search cached places (works offline)")
    _add_bounds_arguments(places, required=True)

    clear = subparsers.add_parser("clear-pending", help="Discard every queued review")
    clear.add_argument(
        "--yes",
        action="store_true",
        help="Confirm that queued reviews should be dropped without syncing",
    )

    return parser.parse_args(list(argv))


def _bounds_from_args(args: argparse.Namespace) -> GeoBounds | None:
    values = (args.south, args.west, args.north, args.east)
    if all(value is None for value in values):
        return None
    if any(value is None for value in values):
        raise ValueError("Bounding box needs all of --south, --west, --north and --east")
    if args.south > args.north:
        raise ValueError("--south must not be greater than --north")
    if not (-90.0 <= args.south <= 90.0 and -90.0 <= args.north <= 90.0):
        raise ValueError("Latitudes must be within [-90, 90]")
    if not (-180.0 <= args.west <= 180.0 and -180.0 <= args.east <= 180.0):
        raise ValueError("Longitudes must be within [-180, 180]")
    return GeoBounds(south=args.south, west=args.west, north=args.north, east=args.east)


def _show_pending() -> None:
    pending = list_pending_mutations()
    log.info("%s queued reviews", len(pending))
    for mutation in pending:
        log.info(
            "%s  %s  %s (visited %s, %s photos)",
            mutation.temp_id,
            mutation.created_at.isoformat(timespec="seconds"),
            mutation.place.name,
            mutation.draft.visited_on.isoformat(),
            len(mutation.draft.attachments),
        )


def _show_places(bounds: GeoBounds) -> None:
    places = search_places(bounds)
    center = bounds.center
    log.info("%s cached places in view", len(places))
    for place in places:
        markers = "".join(
            marker
            for marker, enabled in (
                ("V", place.visited),
                ("F", place.favorite),
                ("W", place.on_wishlist),
            )
            if enabled
        )
        log.info(
            "%-8s %-3s %s (%s reviews)",
            format_distance(center.distance_miles(place.coordinates)),
            markers or "-",
            place.name,
            len(place.reviews),
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(verbose=True, force=True)
        bounds = (
            _bounds_from_args(parsed_args)
            if parsed_args.command in {"refresh", "places"}
            else None
        )
        if parsed_args.command == "clear-pending" and not parsed_args.yes:
            raise ValueError("Refusing to drop queued reviews without --yes")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "pending":
            _show_pending()
        elif parsed_args.command == "sync":
            result = sync_pending_mutations()
            log.info(
                "Sync finished: attempted=%s, synced=%s, failed=%s",
                result.attempted,
                result.synced,
                result.failed,
            )
            if result.failed:
                sys.exit(1)
        elif parsed_args.command == "refresh":
            refresh_places(bounds, limit=parsed_args.limit)
        elif parsed_args.command == "places":
            if bounds is None:
                raise ValueError("Missing bounding box")  # noqa: TRY301
            _show_places(bounds)
        elif parsed_args.command == "clear-pending":
            cleared = clear_pending_mutations()
            log.info("Dropped %s queued reviews", cleared)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
