"""Geospatial helpers."""
from __future__ import annotations

import math
from typing import Iterable, List

from . import config
from .models import Coordinate, Venue


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lng - a.lng)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return config.EARTH_RADIUS_M * c


def miles_to_meters(miles: float) -> float:
    return miles * config.METERS_PER_MILE


def meters_to_miles(meters: float) -> float:
    return meters / config.METERS_PER_MILE


def filter_within_radius(
    center: Coordinate, radius_miles: float, venues: Iterable[Venue]
) -> List[Venue]:
    """Keep venues whose great-circle distance to ``center`` is within the radius.

    Venues without a coordinate are dropped. Input order is preserved.
    """
    limit_m = miles_to_meters(radius_miles)
    kept: List[Venue] = []
    for venue in venues:
        if venue.coordinate is None:
            continue
        if haversine_m(center, venue.coordinate) <= limit_m:
            kept.append(venue)
    return kept
