"""Routes API client for round-trip directions with waypoint optimization."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .errors import RoutingFailure
from .http import HttpClient, HttpStatusError
from .models import Coordinate, DirectionsResult, RouteLeg

logger = logging.getLogger(__name__)

# Client errors that describe the route request rather than auth or quota.
ROUTING_ERROR_HTTP_STATUSES = (400, 404)


class RoutesClient:
    """Directions provider backed by ``directions/v2:computeRoutes``."""

    def __init__(
        self,
        http_client: HttpClient,
        field_mask: str = config.ROUTES_FIELD_MASK,
    ) -> None:
        self.http = http_client
        self.field_mask = field_mask

    def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate],
        optimize: bool,
        mode: Optional[str] = None,
    ) -> DirectionsResult:
        body = build_routes_body(origin, destination, waypoints, optimize, mode or config.TRAVEL_MODE)
        try:
            response = self.http.post_json(config.ROUTES_COMPUTE_URL, body, self.field_mask)
        except HttpStatusError as exc:
            if exc.status_code in ROUTING_ERROR_HTTP_STATUSES and exc.api_status:
                message = (exc.payload.get("error") or {}).get("message")
                raise RoutingFailure(exc.api_status, message) from exc
            raise
        return parse_routes_response(response, len(waypoints), optimize)


def _waypoint(point: Coordinate) -> Dict[str, Any]:
    return {
        "location": {
            "latLng": {
                "latitude": point.lat,
                "longitude": point.lng,
            }
        }
    }


def build_routes_body(
    origin: Coordinate,
    destination: Coordinate,
    waypoints: Sequence[Coordinate],
    optimize: bool,
    mode: str,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "origin": _waypoint(origin),
        "destination": _waypoint(destination),
        # Stopovers: each intermediate ends a leg.
        "intermediates": [_waypoint(p) for p in waypoints],
        "travelMode": mode,
        "optimizeWaypointOrder": bool(optimize),
    }
    if config.ROUTES_BODY_EXTRA:
        body.update(config.ROUTES_BODY_EXTRA)
    return body


def parse_duration_seconds(duration: Any) -> Optional[int]:
    if duration is None:
        return None
    if isinstance(duration, str):
        # Typically in seconds, like "123s"
        if duration.endswith("s"):
            duration = duration[:-1]
        try:
            return int(float(duration))
        except ValueError:
            return None
    if isinstance(duration, (int, float)):
        return int(duration)
    return None


def parse_routes_response(
    response: Dict[str, Any], waypoint_count: int, optimize: bool
) -> DirectionsResult:
    routes = response.get("routes") or []
    if not routes:
        raise RoutingFailure("ZERO_RESULTS")
    route = routes[0]

    legs: List[RouteLeg] = []
    for leg in route.get("legs") or []:
        duration = parse_duration_seconds(leg.get("duration"))
        legs.append(
            RouteLeg(
                # Zero-valued fields are omitted from the JSON response.
                distance_meters=int(leg.get("distanceMeters") or 0),
                duration_seconds=duration or 0,
            )
        )
    if not legs:
        raise RoutingFailure("NO_LEGS")

    if not optimize:
        return DirectionsResult(legs=legs)

    order = route.get("optimizedIntermediateWaypointIndex")
    if not order or order == [-1]:
        order = list(range(waypoint_count))
    order = [int(i) for i in order]
    if sorted(order) != list(range(waypoint_count)):
        logger.error("Provider returned waypoint order %s for %s waypoints", order, waypoint_count)
        raise RoutingFailure("INVALID_WAYPOINT_ORDER")
    return DirectionsResult(legs=legs, order=order)
