"""Round-trip route planning through the current stops."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence

from . import config
from .errors import ProviderError, RoutingFailure
from .geo import meters_to_miles
from .models import Coordinate, DirectionsResult, RouteLeg, RouteSummary, Venue

logger = logging.getLogger(__name__)

STATUS_OK = "OK"
STATUS_PROVIDER_ERROR = "PROVIDER_ERROR"
STATUS_INVALID_ORDER = "INVALID_WAYPOINT_ORDER"


class DirectionsProvider(Protocol):
    def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate],
        optimize: bool,
        mode: Optional[str] = None,
    ) -> DirectionsResult:
        ...


@dataclass(frozen=True)
class PlanResult:
    status: str
    summary: Optional[RouteSummary] = None
    order: Optional[List[int]] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def summarize_legs(legs: Iterable[RouteLeg]) -> RouteSummary:
    total_m = 0
    total_s = 0
    for leg in legs:
        total_m += leg.distance_meters
        total_s += leg.duration_seconds
    return RouteSummary(
        distance_miles=round(meters_to_miles(total_m), 1),
        duration_minutes=int(round(total_s / 60)),
    )


class RoutePlanner:
    def __init__(self, directions: DirectionsProvider, travel_mode: Optional[str] = None) -> None:
        self.directions = directions
        self.travel_mode = travel_mode or config.TRAVEL_MODE

    def plan(self, center: Coordinate, stops: Sequence[Venue], optimize: bool) -> PlanResult:
        """Route center -> stops -> center.

        Never raises for provider failures: they come back as a non-OK
        ``PlanResult`` so the caller can keep its previous summary.
        """
        if not stops:
            return PlanResult(status=STATUS_OK)

        waypoints = []
        for venue in stops:
            if venue.coordinate is None:
                return PlanResult(
                    status="MISSING_COORDINATE",
                    message=f"{venue.name or venue.id} has no location.",
                )
            waypoints.append(venue.coordinate)

        try:
            result = self.directions.route(
                origin=center,
                destination=center,
                waypoints=waypoints,
                optimize=optimize,
                mode=self.travel_mode,
            )
        except RoutingFailure as exc:
            logger.warning("Directions request failed due to %s", exc.status)
            return PlanResult(status=exc.status, message=exc.user_message)
        except ProviderError as exc:
            logger.warning("Directions provider error: %s", exc)
            return PlanResult(status=STATUS_PROVIDER_ERROR, message=exc.user_message)

        order = list(result.order) if optimize and result.order is not None else None
        if order is not None and sorted(order) != list(range(len(stops))):
            logger.warning("Provider returned order %s for %s stops", order, len(stops))
            failure = RoutingFailure(STATUS_INVALID_ORDER)
            return PlanResult(status=failure.status, message=failure.user_message)

        summary = summarize_legs(result.legs)
        logger.info(
            "Route through %s stops: %s, %s (optimize=%s)",
            len(stops),
            summary.distance_label,
            summary.duration_label,
            optimize,
        )
        return PlanResult(status=STATUS_OK, summary=summary, order=order)
