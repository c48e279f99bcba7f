"""CLI entrypoint."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from crawlme import config
from crawlme.geocoding_client import GeocodingClient
from crawlme.http import HttpClient
from crawlme.models import Coordinate, SearchParams
from crawlme.places_client import PlacesClient
from crawlme.reporting import ensure_dir, write_crawl_json, write_stops_csv
from crawlme.routes_client import RoutesClient
from crawlme.session import CrawlSession
from crawlme.share import build_navigation_url, build_share_url, decode_share_query, parse_start

logger = logging.getLogger("crawlme")

SHARE_BASE_URL = "https://crawlme.app/"


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan a round-trip food crawl using Google Maps")
    parser.add_argument("--config", type=str, default=None, help="Path to crawl_config.json")
    parser.add_argument("--share-link", type=str, default=None, help="Start from a share link or query")
    parser.add_argument("--food", type=str, default=None, help="Food type to search for")
    parser.add_argument("--radius", type=float, default=None, help="Search radius in miles")
    parser.add_argument("--stops", type=int, default=None, help="Number of stops")
    parser.add_argument("--min-rating", type=float, default=None)
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--start", type=str, default=None, help="Starting point as 'lat,lng'")
    group.add_argument("--start-address", type=str, default=None, help="Starting point as an address")
    parser.add_argument(
        "--device-location",
        type=str,
        default=None,
        help="Device location as 'lat,lng', used when no custom start is set",
    )
    parser.add_argument(
        "--remove",
        type=int,
        action="append",
        default=[],
        help="Remove the stop at this 1-based position after planning (repeatable)",
    )
    parser.add_argument("--add", type=str, action="append", default=[], help="Add a named stop")
    parser.add_argument("--mode", type=str, default=None, help="Travel mode (DRIVE, WALK, BICYCLE)")
    parser.add_argument("--csv", type=str, default=None, help="Write stops CSV to this path")
    parser.add_argument("--json", type=str, default=None, help="Write crawl snapshot JSON to this path")
    return parser.parse_args(argv)


def _coordinate_arg(value: Optional[str], flag: str) -> Optional[Coordinate]:
    if value is None:
        return None
    coord = parse_start(value)
    if coord is None:
        raise ValueError(f"{flag} must be 'lat,lng', got {value!r}")
    return coord


def build_search_params(args: argparse.Namespace) -> SearchParams:
    shared = decode_share_query(args.share_link) if args.share_link else None
    food = args.food or (shared.food_type if shared else config.DEFAULT_FOOD_TYPE)
    radius = args.radius
    if radius is None:
        radius = shared.radius_miles if shared else config.DEFAULT_RADIUS_MILES
    params = SearchParams(
        food_type=food,
        radius_miles=radius,
        stop_count=args.stops if args.stops is not None else config.DEFAULT_STOP_COUNT,
        min_rating=args.min_rating if args.min_rating is not None else config.DEFAULT_MIN_RATING,
    )
    params.validate()
    return params


def print_crawl(session: CrawlSession) -> None:
    state = session.state
    print(f"Food crawl: {state.params.food_type} within {state.params.radius_miles:g} mi")
    print(f"Start: {session.center.as_param()}")
    for i, venue in enumerate(state.stops, start=1):
        rating = f"{venue.rating:.1f}" if venue.rating is not None else "-"
        print(f"{i:>2}. {venue.name} ({rating}, {venue.rating_count or 0} ratings)")
        if venue.address:
            print(f"    {venue.address}")
    if state.summary:
        print(f"Route: {state.summary.distance_label}, {state.summary.duration_label}")
    if state.notice:
        print(f"Note: {state.notice}")


async def plan_crawl(
    session: CrawlSession,
    args: argparse.Namespace,
    params: SearchParams,
    start: Optional[Coordinate] = None,
) -> bool:
    if args.start_address or start is not None:
        if not await session.set_start(args.start_address or start):
            return False
    if not await session.search(params):
        return False
    # Remove from the end so earlier positions stay valid.
    for position in sorted(set(args.remove), reverse=True):
        if position < 1 or position > len(session.state.stops):
            print(f"Ignoring --remove {position}: no such stop", file=sys.stderr)
            continue
        await session.remove_stop(position - 1)
    for query in args.add:
        await session.add_stop(query)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    args = parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        loaded = config.load_crawl_config(args.config)
    except ValueError as exc:
        print(f"Invalid crawl config: {exc}", file=sys.stderr)
        return 1
    if loaded:
        logger.info("Loaded crawl config")
    elif args.config:
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 1

    api_key = (os.environ.get("GOOGLE_MAPS_API_KEY") or "").strip()
    if not api_key:
        print("Missing GOOGLE_MAPS_API_KEY in environment", file=sys.stderr)
        return 1

    try:
        params = build_search_params(args)
        device_location = _coordinate_arg(args.device_location, "--device-location")
        start = _coordinate_arg(args.start, "--start")
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if start is None and args.share_link and not args.start_address:
        start = decode_share_query(args.share_link).start

    http_client = HttpClient(
        api_key=api_key,
        timeout=config.HTTP_TIMEOUT_SECONDS,
        retry_max=config.HTTP_RETRY_MAX,
        backoff_base=config.HTTP_BACKOFF_BASE,
        backoff_max=config.HTTP_BACKOFF_MAX,
    )
    session = CrawlSession(
        venue_source=PlacesClient(http_client),
        directions=RoutesClient(http_client),
        geocoder=GeocodingClient(http_client),
        params=params,
        device_location=device_location,
        travel_mode=(args.mode or config.TRAVEL_MODE).upper(),
    )

    ok = asyncio.run(plan_crawl(session, args, params, start))
    print_crawl(session)
    if not ok:
        return 1

    state = session.state
    print(
        "Share: "
        + build_share_url(SHARE_BASE_URL, session.custom_start, params.food_type, params.radius_miles)
    )
    print("Navigate: " + build_navigation_url(session.center, state.stops, session.planner.travel_mode))

    if args.csv:
        ensure_dir(os.path.dirname(args.csv) or ".")
        write_stops_csv(args.csv, state.stops)
        print(f"Stops written to {args.csv}")
    if args.json:
        ensure_dir(os.path.dirname(args.json) or ".")
        write_crawl_json(args.json, state)
        print(f"Crawl written to {args.json}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
