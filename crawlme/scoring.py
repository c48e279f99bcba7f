"""Venue ranking based on rating dampened by review volume."""
from __future__ import annotations

import math
from typing import Iterable, List, Optional

from . import config
from .models import Venue


def count_dampening(rating_count: Optional[int], base: Optional[float] = None) -> float:
    """Concave, strictly increasing weight for a review count; zero reviews -> 0."""
    b = config.SCORE_COUNT_LOG_BASE if base is None else base
    n = max(0, int(rating_count or 0))
    return math.log10(1 + n) / math.log10(b)


def crawl_score(venue: Venue, base: Optional[float] = None) -> float:
    rating = float(venue.rating or 0.0)
    return rating * count_dampening(venue.rating_count, base)


def rank_venues(venues: Iterable[Venue]) -> List[Venue]:
    # sorted() is stable, so equal scores keep source order
    return sorted(venues, key=crawl_score, reverse=True)


def filter_min_rating(venues: Iterable[Venue], min_rating: float) -> List[Venue]:
    if min_rating <= 0:
        return list(venues)
    return [v for v in venues if v.rating is not None and v.rating >= min_rating]


def select_top(venues: Iterable[Venue], k: int) -> List[Venue]:
    if k <= 0:
        return []
    return rank_venues(venues)[:k]
