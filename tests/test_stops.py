from dataclasses import replace

import pytest

from crawlme.errors import DuplicateVenue, IndexOutOfRange, InvalidPermutation
from crawlme.models import (
    Coordinate,
    CrawlState,
    CrawlStatus,
    RouteOptions,
    RouteSummary,
    SearchParams,
    Venue,
)
from crawlme.stops import append, apply_route_result, remove_at, reorder, replace_all


def make_venue(i: int) -> Venue:
    return Venue(id=f"v{i}", name=f"Venue {i}", coordinate=Coordinate(40.0 + i / 1000, -74.0))


def state_with(n: int, stop_count: int = 5, **kwargs) -> CrawlState:
    base = CrawlState(params=SearchParams(food_type="tacos", radius_miles=5, stop_count=stop_count))
    state = replace_all(base, [make_venue(i) for i in range(n)])
    return replace(state, **kwargs)


def test_replace_all_takes_top_stop_count_and_enables_optimize():
    state = state_with(8, stop_count=3, options=RouteOptions(optimize=False))
    state = replace_all(state, [make_venue(i) for i in range(8)])
    assert state.stop_ids == ["v0", "v1", "v2"]
    assert state.options.optimize is True
    assert state.summary is None


def test_replace_all_with_fewer_candidates_than_stop_count():
    state = state_with(2, stop_count=5)
    assert state.stop_ids == ["v0", "v1"]


def test_replace_all_skips_duplicate_ids():
    base = CrawlState(params=SearchParams(stop_count=3))
    state = replace_all(base, [make_venue(1), make_venue(1), make_venue(2), make_venue(3)])
    assert state.stop_ids == ["v1", "v2", "v3"]


def test_append_adds_at_end_and_disables_optimize():
    state = state_with(3)
    new = append(state, make_venue(9))
    assert new.stop_ids == ["v0", "v1", "v2", "v9"]
    assert new.options.optimize is False


def test_append_duplicate_leaves_state_unchanged():
    summary = RouteSummary(distance_miles=2.8, duration_minutes=35)
    state = state_with(3, summary=summary, status=CrawlStatus.READY)
    with pytest.raises(DuplicateVenue):
        append(state, make_venue(1))
    assert state.stop_ids == ["v0", "v1", "v2"]
    assert state.summary == summary
    assert state.options.optimize is True


def test_remove_at_preserves_relative_order():
    state = state_with(5)
    new = remove_at(state, 2)
    assert new.stop_ids == ["v0", "v1", "v3", "v4"]
    assert len(new.stops) == len(state.stops) - 1
    assert new.options.optimize is False
    assert new.summary is None


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_remove_at_invalid_index(index):
    state = state_with(3)
    with pytest.raises(IndexOutOfRange):
        remove_at(state, index)
    assert state.stop_ids == ["v0", "v1", "v2"]


def test_reorder_accepts_ids_or_venues():
    state = state_with(3)
    by_ids = reorder(state, ["v2", "v0", "v1"])
    assert by_ids.stop_ids == ["v2", "v0", "v1"]
    assert by_ids.options.optimize is False
    by_venues = reorder(state, [state.stops[1], state.stops[2], state.stops[0]])
    assert by_venues.stop_ids == ["v1", "v2", "v0"]


@pytest.mark.parametrize(
    "order",
    [
        ["v2", "v0"],
        ["v2", "v0", "v0"],
        ["v2", "v0", "v1", "v9"],
        ["v2", "v0", "v9"],
    ],
)
def test_reorder_rejects_non_permutations(order):
    state = state_with(3)
    with pytest.raises(InvalidPermutation):
        reorder(state, order)
    assert state.stop_ids == ["v0", "v1", "v2"]


def test_apply_route_result_reorders_to_provider_permutation():
    state = state_with(4)
    summary = RouteSummary(distance_miles=4.2, duration_minutes=18)
    new = apply_route_result(state, summary, [2, 0, 3, 1])
    assert new.stop_ids == ["v2", "v0", "v3", "v1"]
    assert new.summary == summary
    assert new.status is CrawlStatus.READY


def test_apply_route_result_without_order_keeps_user_order():
    state = reorder(state_with(3), ["v1", "v2", "v0"])
    new = apply_route_result(state, RouteSummary(1.0, 5))
    assert new.stop_ids == ["v1", "v2", "v0"]


def test_apply_route_result_rejects_bad_permutation():
    state = state_with(3)
    with pytest.raises(InvalidPermutation):
        apply_route_result(state, RouteSummary(1.0, 5), [0, 1])


def test_apply_route_result_for_empty_crawl_is_idle():
    state = remove_at(state_with(1), 0)
    new = apply_route_result(state, None)
    assert new.stops == ()
    assert new.status is CrawlStatus.IDLE
