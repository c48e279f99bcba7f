"""Crawl data model."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import config


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lng}")

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(frozen=True)
class Venue:
    id: str
    name: Optional[str] = None
    coordinate: Optional[Coordinate] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class SearchParams:
    food_type: str = field(default_factory=lambda: config.DEFAULT_FOOD_TYPE)
    radius_miles: float = field(default_factory=lambda: config.DEFAULT_RADIUS_MILES)
    stop_count: int = field(default_factory=lambda: config.DEFAULT_STOP_COUNT)
    min_rating: float = field(default_factory=lambda: config.DEFAULT_MIN_RATING)

    def validate(self) -> None:
        if not (self.food_type or "").strip():
            raise ValueError("food_type must not be empty")
        if self.radius_miles <= 0:
            raise ValueError("radius_miles must be positive")
        if self.radius_miles > config.MAX_RADIUS_MILES:
            raise ValueError(f"radius_miles must be <= {config.MAX_RADIUS_MILES}")
        if self.stop_count < config.MIN_STOP_COUNT:
            raise ValueError(f"stop_count must be >= {config.MIN_STOP_COUNT}")
        if self.stop_count > config.MAX_STOP_COUNT:
            raise ValueError(f"stop_count must be <= {config.MAX_STOP_COUNT}")
        if not 0.0 <= self.min_rating <= 5.0:
            raise ValueError("min_rating must be between 0 and 5")


@dataclass(frozen=True)
class RouteOptions:
    optimize: bool = True


@dataclass(frozen=True)
class RouteSummary:
    distance_miles: float
    duration_minutes: int

    @property
    def distance_label(self) -> str:
        return f"{self.distance_miles:.1f} mi"

    @property
    def duration_label(self) -> str:
        return f"{self.duration_minutes} min"


@dataclass(frozen=True)
class RouteLeg:
    distance_meters: int
    duration_seconds: int


@dataclass(frozen=True)
class DirectionsResult:
    legs: List[RouteLeg]
    # Indices into the submitted waypoints, in visiting order.
    order: Optional[List[int]] = None


class CrawlStatus(enum.Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    ROUTING = "routing"
    READY = "ready"


@dataclass(frozen=True)
class CrawlState:
    params: SearchParams = field(default_factory=SearchParams)
    center: Optional[Coordinate] = None
    stops: Tuple[Venue, ...] = ()
    options: RouteOptions = field(default_factory=RouteOptions)
    summary: Optional[RouteSummary] = None
    status: CrawlStatus = CrawlStatus.IDLE
    notice: Optional[str] = None

    @property
    def stop_ids(self) -> List[str]:
        return [v.id for v in self.stops]
