"""Geocoding API client."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from . import config
from .errors import NotFound, ProviderError
from .http import HttpClient
from .models import Coordinate

logger = logging.getLogger(__name__)


class GeocodingClient:
    def __init__(self, http_client: HttpClient) -> None:
        self.http = http_client

    def resolve(self, address: str) -> Coordinate:
        query = (address or "").strip()
        if not query:
            raise NotFound(address)
        response = self.http.get_json(config.GEOCODE_URL, {"address": query})
        coordinate = parse_geocode_response(response, query)
        logger.info("Geocoded '%s' to %s", query, coordinate.as_param())
        return coordinate


def parse_geocode_response(response: Dict[str, Any], query: str) -> Coordinate:
    status = response.get("status", "OK")
    if status == "ZERO_RESULTS":
        raise NotFound(query)
    if status != "OK":
        raise ProviderError(f"Geocoding status {status}: {response.get('error_message', '')}".strip())
    results = response.get("results") or []
    location: Optional[Dict[str, Any]] = None
    if results:
        location = (results[0].get("geometry") or {}).get("location")
    if not location or location.get("lat") is None or location.get("lng") is None:
        raise NotFound(query)
    return Coordinate(float(location["lat"]), float(location["lng"]))
