"""Places API (New) text search client and response parsing."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from . import config
from .http import HttpClient
from .models import Coordinate, Venue

logger = logging.getLogger(__name__)


class PlacesClient:
    """Venue source backed by ``places:searchText``."""

    def __init__(
        self,
        http_client: HttpClient,
        field_mask: str = config.PLACES_FIELD_MASK,
        bias_radius_m: Optional[float] = None,
    ) -> None:
        self.http = http_client
        self.field_mask = field_mask
        self.bias_radius_m = bias_radius_m

    def search(
        self,
        query: str,
        bias: Coordinate,
        max_results: int,
        radius_m: Optional[float] = None,
    ) -> List[Venue]:
        radius = radius_m if radius_m is not None else self.bias_radius_m
        body = build_text_search_body(query, bias, max_results, radius_m=radius)
        response = self.http.post_json(config.PLACES_TEXT_SEARCH_URL, body, self.field_mask)
        venues = parse_places_response(response)
        logger.info("Places search '%s' returned %s venues", query, len(venues))
        return venues


def build_text_search_body(
    query: str,
    bias: Coordinate,
    max_results: int,
    radius_m: Optional[float] = None,
) -> Dict[str, Any]:
    radius = float(radius_m) if radius_m is not None else config.PLACES_MAX_BIAS_RADIUS_M
    radius = max(0.0, min(radius, config.PLACES_MAX_BIAS_RADIUS_M))
    body: Dict[str, Any] = {
        "textQuery": query,
        "maxResultCount": max(1, min(int(max_results), config.PLACES_MAX_RESULTS)),
        "locationBias": {
            "circle": {
                "center": {"latitude": bias.lat, "longitude": bias.lng},
                "radius": radius,
            }
        },
    }
    if config.PLACES_TEXT_SEARCH_BODY_EXTRA:
        body.update(config.PLACES_TEXT_SEARCH_BODY_EXTRA)
    return body


# Adapter/mapper for Places response fields

def parse_places_response(response: Dict[str, Any]) -> List[Venue]:
    places = response.get("places") or []
    parsed: List[Venue] = []
    for p in places:
        place_id = p.get("id") or p.get("placeId")
        if not place_id:
            continue
        display = p.get("displayName")
        if isinstance(display, dict):
            name = display.get("text") or display.get("value")
        else:
            name = display
        rating = p.get("rating")
        rating_count = p.get("userRatingCount") or p.get("user_ratings_total")
        parsed.append(
            Venue(
                id=place_id,
                name=name,
                coordinate=_parse_location(p.get("location") or p.get("latLng") or {}),
                rating=float(rating) if rating is not None else None,
                rating_count=int(rating_count) if rating_count is not None else None,
                address=p.get("formattedAddress") or p.get("formatted_address"),
            )
        )
    return parsed


def _parse_location(location: Dict[str, Any]) -> Optional[Coordinate]:
    lat = location.get("latitude", location.get("lat"))
    lng = location.get("longitude", location.get("lng", location.get("lon")))
    if lat is None or lng is None:
        return None
    try:
        return Coordinate(float(lat), float(lng))
    except ValueError:
        logger.warning("Dropping invalid location %s", location)
        return None
