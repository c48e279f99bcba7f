"""Project configuration.

Loads crawl defaults from crawl_config.json when available, falling back to
sensible defaults. Keep API request shapes centralized here.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- API endpoints ---

PLACES_TEXT_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
ROUTES_COMPUTE_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
NAVIGATION_BASE_URL = "https://www.google.com/maps/dir/"

# --- Field masks ---

PLACES_FIELD_MASK = (
    "places.id,places.displayName,places.rating,places.userRatingCount,"
    "places.location,places.formattedAddress"
)
ROUTES_FIELD_MASK = (
    "routes.legs.distanceMeters,routes.legs.duration,"
    "routes.optimizedIntermediateWaypointIndex"
)

# --- Search defaults ---

DEFAULT_FOOD_TYPE = "burgers"
DEFAULT_RADIUS_MILES = 5.0
DEFAULT_STOP_COUNT = 10
DEFAULT_MIN_RATING = 0.0
MIN_STOP_COUNT = 2
MAX_STOP_COUNT = 20
MAX_RADIUS_MILES = 20.0

# Used when no device location is known (New York City).
DEFAULT_CENTER: Dict[str, float] = {"lat": 40.7128, "lng": -74.0060}

# --- Units ---

METERS_PER_MILE = 1609.34
EARTH_RADIUS_M = 6371008.8

# --- Scoring ---

# score = rating * log_base(1 + rating_count)
SCORE_COUNT_LOG_BASE = 10.0

# --- Places API request shape ---

PLACES_MAX_RESULTS = 20
PLACES_MAX_BIAS_RADIUS_M = 50000.0
PLACES_TEXT_SEARCH_BODY_EXTRA: Dict[str, Any] = {}

# --- Routes ---

TRAVEL_MODE = "DRIVE"
ROUTES_BODY_EXTRA: Dict[str, Any] = {}

# Routes API travel modes -> Google Maps URL travelmode values
NAVIGATION_TRAVEL_MODES: Dict[str, str] = {
    "DRIVE": "driving",
    "WALK": "walking",
    "BICYCLE": "bicycling",
    "TRANSIT": "transit",
    "TWO_WHEELER": "driving",
}

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20
HTTP_RETRY_MAX = 5
HTTP_BACKOFF_BASE = 0.5
HTTP_BACKOFF_MAX = 8.0

# --- Outputs ---

OUTPUT_DIR = "out"


def load_crawl_config(path: Optional[str] = None) -> bool:
    """Load crawl defaults from a JSON file.

    Updates module-level globals with values from the config file.
    Returns True if config was loaded, False if file not found.
    """
    if path is None:
        path = str(_REPO_ROOT / "crawl_config.json")

    config_path = Path(path)
    if not config_path.exists():
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    base = data.get("scoring", {}).get("count_log_base")
    if base is not None:
        base = float(base)
        # A base <= 1 makes the dampening divide by zero or decrease.
        if base <= 1:
            raise ValueError(f"scoring.count_log_base must be greater than 1, got {base:g}")

    globals_ref = globals()

    center = data.get("center", {})
    center_lat = center.get("lat")
    center_lng = center.get("lng", center.get("lon"))
    if center_lat is not None and center_lng is not None:
        globals_ref["DEFAULT_CENTER"] = {"lat": float(center_lat), "lng": float(center_lng)}

    food_type = data.get("food_type")
    if food_type:
        globals_ref["DEFAULT_FOOD_TYPE"] = str(food_type)

    radius = data.get("radius_miles")
    if radius is not None:
        globals_ref["DEFAULT_RADIUS_MILES"] = float(radius)

    stops = data.get("stops")
    if stops is not None:
        globals_ref["DEFAULT_STOP_COUNT"] = int(stops)

    min_rating = data.get("min_rating")
    if min_rating is not None:
        globals_ref["DEFAULT_MIN_RATING"] = float(min_rating)

    travel_mode = data.get("travel_mode")
    if travel_mode:
        globals_ref["TRAVEL_MODE"] = str(travel_mode).upper()

    if base is not None:
        globals_ref["SCORE_COUNT_LOG_BASE"] = base

    return True
