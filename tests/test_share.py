from urllib.parse import parse_qs, urlparse

import pytest

from crawlme import config
from crawlme.models import Coordinate, Venue
from crawlme.share import (
    ShareConfig,
    build_navigation_url,
    build_share_url,
    decode_share_query,
    encode_share_query,
)


def test_encode_share_query_fields():
    query = encode_share_query(Coordinate(40.7128, -74.006), "dim sum", 3.5)
    parsed = parse_qs(query)
    assert parsed == {"start": ["40.7128,-74.006"], "q": ["dim sum"], "r": ["3.5"]}


def test_share_url_decodes_back():
    url = build_share_url("https://crawlme.app/?old=1", Coordinate(34.05, -118.25), "tacos", 7)
    assert url.startswith("https://crawlme.app/?")
    decoded = decode_share_query(url)
    assert decoded == ShareConfig(start=Coordinate(34.05, -118.25), food_type="tacos", radius_miles=7.0)


def test_share_without_start_means_device_location():
    decoded = decode_share_query(encode_share_query(None, "ramen", 2))
    assert decoded.start is None
    assert decoded.food_type == "ramen"


@pytest.mark.parametrize(
    "query",
    [
        "",
        "?",
        "start=abc&q=&r=lots",
        "start=91,10&r=-4",
        "start=1,2,3&r=nan",
        "start=40.7&r=500",
    ],
)
def test_malformed_share_query_falls_back_to_defaults(query):
    decoded = decode_share_query(query)
    assert decoded.start is None
    assert decoded.food_type == config.DEFAULT_FOOD_TYPE
    assert decoded.radius_miles == config.DEFAULT_RADIUS_MILES


def test_partial_share_query_keeps_valid_parts():
    decoded = decode_share_query({"start": ["not-a-point"], "q": "pho", "r": ["4"]})
    assert decoded.start is None
    assert decoded.food_type == "pho"
    assert decoded.radius_miles == 4.0


def test_navigation_url_is_round_trip_in_visit_order():
    origin = Coordinate(40.0, -74.0)
    stops = [
        Venue(id="b", coordinate=Coordinate(40.02, -74.01)),
        Venue(id="none"),
        Venue(id="a", coordinate=Coordinate(40.01, -74.0)),
    ]
    url = build_navigation_url(origin, stops, "WALK")
    parsed = urlparse(url)
    params = parse_qs(parsed.query)

    assert url.startswith(config.NAVIGATION_BASE_URL)
    assert "%7C" in url
    assert params["api"] == ["1"]
    assert params["origin"] == ["40.0,-74.0"]
    assert params["destination"] == params["origin"]
    assert params["waypoints"] == ["40.02,-74.01|40.01,-74.0"]
    assert params["travelmode"] == ["walking"]


def test_navigation_url_without_stops_has_no_waypoints():
    params = parse_qs(urlparse(build_navigation_url(Coordinate(1.0, 2.0), [])).query)
    assert "waypoints" not in params
    assert params["travelmode"] == ["driving"]
