"""Crawl session: drives searches, stop edits and route recomputation.

The session owns the single ``CrawlState``. Stop edits are applied
synchronously, in the order they are issued, before any await. Collaborator
calls run in worker threads via ``asyncio.to_thread``. Each route request
takes a sequence number and only the response for the latest one may
update state.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import List, Optional, Protocol, Sequence, Union

from . import config
from .errors import (
    CrawlError,
    NoCandidates,
    NoCandidatesAboveRating,
    NoCandidatesInRadius,
    SearchInProgress,
)
from .geo import filter_within_radius, miles_to_meters
from .models import Coordinate, CrawlState, CrawlStatus, SearchParams, Venue
from .planner import DirectionsProvider, PlanResult, RoutePlanner
from .scoring import filter_min_rating, select_top
from .stops import append, apply_route_result, remove_at, reorder, replace_all, unique_by_id

logger = logging.getLogger(__name__)


class VenueSource(Protocol):
    def search(
        self,
        query: str,
        bias: Coordinate,
        max_results: int,
        radius_m: Optional[float] = None,
    ) -> List[Venue]:
        ...


class Geocoder(Protocol):
    def resolve(self, address: str) -> Coordinate:
        ...


def default_center() -> Coordinate:
    return Coordinate(config.DEFAULT_CENTER["lat"], config.DEFAULT_CENTER["lng"])


class CrawlSession:
    def __init__(
        self,
        venue_source: VenueSource,
        directions: DirectionsProvider,
        geocoder: Optional[Geocoder] = None,
        params: Optional[SearchParams] = None,
        device_location: Optional[Coordinate] = None,
        travel_mode: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> None:
        self.venue_source = venue_source
        self.geocoder = geocoder
        self.planner = RoutePlanner(directions, travel_mode)
        self.max_results = max_results or config.PLACES_MAX_RESULTS
        self.device_location = device_location
        self.custom_start: Optional[Coordinate] = None
        self.state = CrawlState(params=params or SearchParams(), center=self._fallback_center())
        self.is_searching = False
        self._route_seq = 0
        self._route_resolved_seq = 0

    # ------------------------------------------------------------------ #
    # Status
    # ------------------------------------------------------------------ #

    @property
    def is_routing(self) -> bool:
        return self._route_resolved_seq < self._route_seq

    @property
    def center(self) -> Coordinate:
        return self.state.center or self._fallback_center()

    def _fallback_center(self) -> Coordinate:
        return self.custom_start or self.device_location or default_center()

    def _settled_status(self) -> CrawlStatus:
        if self.is_routing:
            return CrawlStatus.ROUTING
        return CrawlStatus.READY if self.state.summary is not None else CrawlStatus.IDLE

    def _fail(self, exc: CrawlError) -> bool:
        logger.warning("%s: %s", type(exc).__name__, exc)
        self.state = replace(self.state, notice=exc.user_message)
        return False

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def set_params(self, params: SearchParams) -> None:
        params.validate()
        self.state = replace(self.state, params=params)

    def set_device_location(self, location: Optional[Coordinate]) -> None:
        self.device_location = location
        if self.custom_start is None:
            self.state = replace(self.state, center=self._fallback_center())

    async def set_start(self, start: Union[str, Coordinate]) -> bool:
        """Use a custom starting point, given as a coordinate or a free-text address."""
        if isinstance(start, Coordinate):
            location = start
        else:
            if self.geocoder is None:
                raise RuntimeError("No geocoder configured for address lookup")
            try:
                location = await asyncio.to_thread(self.geocoder.resolve, start)
            except CrawlError as exc:
                return self._fail(exc)
        self.custom_start = location
        return await self._move_center(location)

    async def clear_start(self) -> bool:
        """Drop the custom start and fall back to the device location."""
        self.custom_start = None
        return await self._move_center(self._fallback_center())

    async def _move_center(self, location: Coordinate) -> bool:
        self.state = replace(self.state, center=location, notice=None)
        if not self.state.stops:
            return True
        return await self._reroute()

    # ------------------------------------------------------------------ #
    # Search
    # ------------------------------------------------------------------ #

    async def search(self, params: Optional[SearchParams] = None) -> bool:
        if self.is_searching:
            return self._fail(SearchInProgress())
        params = params or self.state.params
        params.validate()

        center = self.center
        self.is_searching = True
        self.state = replace(self.state, status=CrawlStatus.SEARCHING)
        try:
            ranked = await asyncio.to_thread(self._find_candidates, params, center)
        except CrawlError as exc:
            self.state = replace(self.state, status=self._settled_status())
            return self._fail(exc)
        finally:
            self.is_searching = False

        logger.info("Search '%s' selected %s stops", params.food_type, len(ranked))
        self.state = replace_all(
            replace(self.state, params=params, center=center, notice=None), ranked
        )
        return await self._reroute()

    def _find_candidates(self, params: SearchParams, center: Coordinate) -> List[Venue]:
        candidates = self.venue_source.search(
            params.food_type,
            center,
            self.max_results,
            radius_m=miles_to_meters(params.radius_miles),
        )
        # Ids must be unique before ranking.
        candidates = unique_by_id(candidates)
        if not candidates:
            raise NoCandidates(params.food_type)
        in_radius = filter_within_radius(center, params.radius_miles, candidates)
        if not in_radius:
            raise NoCandidatesInRadius(params.radius_miles)
        rated = filter_min_rating(in_radius, params.min_rating)
        if not rated:
            raise NoCandidatesAboveRating(params.min_rating)
        return select_top(rated, params.stop_count)

    # ------------------------------------------------------------------ #
    # Stop edits
    # ------------------------------------------------------------------ #

    async def add_venue(self, venue: Venue) -> bool:
        try:
            self.state = replace(append(self.state, venue), notice=None)
        except CrawlError as exc:
            return self._fail(exc)
        return await self._reroute()

    async def add_stop(self, query: str) -> bool:
        """Look up a named place near the start and append the best match."""
        try:
            found = await asyncio.to_thread(
                self.venue_source.search,
                query,
                self.center,
                1,
                radius_m=miles_to_meters(self.state.params.radius_miles),
            )
        except CrawlError as exc:
            return self._fail(exc)
        if not found:
            return self._fail(NoCandidates(query))
        return await self.add_venue(found[0])

    async def remove_stop(self, index: int) -> bool:
        self.state = replace(remove_at(self.state, index), notice=None)
        return await self._reroute()

    async def reorder_stops(self, new_order: Sequence[Union[str, Venue]]) -> bool:
        self.state = replace(reorder(self.state, new_order), notice=None)
        return await self._reroute()

    # ------------------------------------------------------------------ #
    # Routing
    # ------------------------------------------------------------------ #

    async def _reroute(self) -> bool:
        self._route_seq += 1
        seq = self._route_seq
        center = self.center
        stops = self.state.stops
        optimize = self.state.options.optimize
        # Structural edits already cleared the summary; a start move keeps it.
        self.state = replace(self.state, status=CrawlStatus.ROUTING)

        try:
            result: PlanResult = await asyncio.to_thread(self.planner.plan, center, stops, optimize)
        finally:
            if seq == self._route_seq:
                self._route_resolved_seq = seq

        if seq != self._route_seq:
            logger.info("Discarding stale route response #%s (latest #%s)", seq, self._route_seq)
            return False

        if not result.ok:
            logger.warning("Route planning failed: %s", result.status)
            self.state = replace(
                self.state, status=self._settled_status(), notice=result.message
            )
            return False

        self.state = apply_route_result(self.state, result.summary, result.order)
        return True
