"""Share links and navigation hand-off URLs."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union
from urllib.parse import parse_qs, urlencode, urlparse

from . import config
from .models import Coordinate, Venue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShareConfig:
    # None means "use the device location"
    start: Optional[Coordinate] = None
    food_type: str = field(default_factory=lambda: config.DEFAULT_FOOD_TYPE)
    radius_miles: float = field(default_factory=lambda: config.DEFAULT_RADIUS_MILES)


def encode_share_query(start: Optional[Coordinate], food_type: str, radius_miles: float) -> str:
    params = {}
    if start is not None:
        params["start"] = start.as_param()
    params["q"] = food_type
    params["r"] = f"{radius_miles:g}"
    return urlencode(params)


def build_share_url(
    base_url: str, start: Optional[Coordinate], food_type: str, radius_miles: float
) -> str:
    base = base_url.split("?", 1)[0]
    return f"{base}?{encode_share_query(start, food_type, radius_miles)}"


def parse_start(value: Optional[str]) -> Optional[Coordinate]:
    if not value:
        return None
    parts = value.split(",")
    if len(parts) != 2:
        return None
    try:
        lat = float(parts[0])
        lng = float(parts[1])
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return None
        return Coordinate(lat, lng)
    except ValueError:
        return None


def _parse_radius(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        radius = float(value)
    except ValueError:
        return None
    if not math.isfinite(radius) or radius <= 0 or radius > config.MAX_RADIUS_MILES:
        return None
    return radius


def decode_share_query(query: Union[str, Mapping[str, Sequence[str]]]) -> ShareConfig:
    """Decode ``start``/``q``/``r`` parameters, falling back to defaults.

    Accepts a raw query string, a full URL, or an already parsed mapping.
    Never raises on bad input.
    """
    if isinstance(query, str):
        text = urlparse(query).query if "://" in query else query.lstrip("?")
        parsed = parse_qs(text)
    else:
        parsed = {k: list(v) if not isinstance(v, str) else [v] for k, v in query.items()}

    def first(name: str) -> Optional[str]:
        values = parsed.get(name) or []
        return values[0].strip() if values and values[0] else None

    start = parse_start(first("start"))
    if first("start") and start is None:
        logger.warning("Ignoring malformed start parameter: %s", first("start"))

    radius = _parse_radius(first("r"))
    if first("r") and radius is None:
        logger.warning("Ignoring malformed radius parameter: %s", first("r"))

    return ShareConfig(
        start=start,
        food_type=first("q") or config.DEFAULT_FOOD_TYPE,
        radius_miles=radius if radius is not None else config.DEFAULT_RADIUS_MILES,
    )


def build_navigation_url(
    origin: Coordinate, stops: Sequence[Venue], travel_mode: Optional[str] = None
) -> str:
    """Round-trip Google Maps directions URL visiting ``stops`` in order."""
    mode = (travel_mode or config.TRAVEL_MODE).upper()
    waypoints = [v.coordinate.as_param() for v in stops if v.coordinate is not None]
    params = {
        "api": "1",
        "origin": origin.as_param(),
        "destination": origin.as_param(),
        "travelmode": config.NAVIGATION_TRAVEL_MODES.get(mode, "driving"),
    }
    if waypoints:
        params["waypoints"] = "|".join(waypoints)
    return f"{config.NAVIGATION_BASE_URL}?{urlencode(params)}"
