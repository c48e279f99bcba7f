"""Crawl error taxonomy.

User-facing errors carry a ``user_message`` and are surfaced by the session
as notices. ``InvalidPermutation`` and ``IndexOutOfRange`` are contract
violations and propagate to the caller.
"""
from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    user_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class NoCandidates(CrawlError):
    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"No places found for '{query}'.")


class NoCandidatesInRadius(CrawlError):
    def __init__(self, radius_miles: float) -> None:
        self.radius_miles = radius_miles
        super().__init__(f"No places found within {radius_miles:g} miles.")


class NoCandidatesAboveRating(CrawlError):
    def __init__(self, min_rating: float) -> None:
        self.min_rating = min_rating
        super().__init__(f"No places rated {min_rating:g} or higher.")


class DuplicateVenue(CrawlError):
    def __init__(self, venue_id: str, name: Optional[str] = None) -> None:
        self.venue_id = venue_id
        super().__init__(f"{name or venue_id} is already in your crawl.")


class RoutingFailure(CrawlError):
    def __init__(self, status: str, detail: Optional[str] = None) -> None:
        self.status = status
        self.detail = detail
        super().__init__(f"Could not calculate route ({status}).")


class ProviderError(CrawlError):
    """Transport, auth or unexpected response failure from a collaborator."""

    user_message = "Error reaching the maps service. Please try again."

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__()

    def __str__(self) -> str:
        return self.detail or self.user_message


class NotFound(CrawlError):
    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"No match found for '{query}'.")


class SearchInProgress(CrawlError):
    user_message = "A search is already running."


class InvalidPermutation(ValueError):
    pass


class IndexOutOfRange(IndexError):
    pass
