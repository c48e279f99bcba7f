"""Stop Set transitions.

Each function takes a ``CrawlState`` and returns a new one. On failure the
function raises before building anything, so the caller's state is never
partially updated.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .errors import DuplicateVenue, IndexOutOfRange, InvalidPermutation
from .models import CrawlState, CrawlStatus, RouteOptions, RouteSummary, Venue


def unique_by_id(venues: Iterable[Venue]) -> List[Venue]:
    seen = set()
    out: List[Venue] = []
    for venue in venues:
        if venue.id in seen:
            continue
        seen.add(venue.id)
        out.append(venue)
    return out


def _edited(state: CrawlState, stops: Tuple[Venue, ...]) -> CrawlState:
    return replace(
        state,
        stops=stops,
        options=RouteOptions(optimize=False),
        summary=None,
    )


def replace_all(state: CrawlState, ranked: Iterable[Venue]) -> CrawlState:
    """Populate the Stop Set from a fresh search, already in score order."""
    stops = tuple(unique_by_id(ranked)[: state.params.stop_count])
    return replace(
        state,
        stops=stops,
        options=RouteOptions(optimize=True),
        summary=None,
    )


def append(state: CrawlState, venue: Venue) -> CrawlState:
    if venue.id in state.stop_ids:
        raise DuplicateVenue(venue.id, venue.name)
    return _edited(state, state.stops + (venue,))


def remove_at(state: CrawlState, index: int) -> CrawlState:
    if not isinstance(index, int) or index < 0 or index >= len(state.stops):
        raise IndexOutOfRange(f"Stop index {index} out of range (0..{len(state.stops) - 1})")
    return _edited(state, state.stops[:index] + state.stops[index + 1 :])


def reorder(state: CrawlState, new_order: Sequence[Union[str, Venue]]) -> CrawlState:
    """Apply a user-supplied permutation, given as venue ids or venues."""
    ids = [item.id if isinstance(item, Venue) else item for item in new_order]
    if Counter(ids) != Counter(state.stop_ids):
        raise InvalidPermutation(
            f"New order {ids} is not a permutation of current stops {state.stop_ids}"
        )
    by_id = {v.id: v for v in state.stops}
    return _edited(state, tuple(by_id[i] for i in ids))


def apply_route_result(
    state: CrawlState,
    summary: Optional[RouteSummary],
    order: Optional[Sequence[int]] = None,
) -> CrawlState:
    """Record a resolved route; ``order`` is the provider's waypoint permutation."""
    stops = state.stops
    if order is not None:
        if sorted(order) != list(range(len(stops))):
            raise InvalidPermutation(
                f"Provider order {list(order)} does not cover {len(stops)} stops"
            )
        stops = tuple(stops[i] for i in order)
    return replace(
        state,
        stops=stops,
        summary=summary,
        status=CrawlStatus.READY if summary is not None else CrawlStatus.IDLE,
    )
