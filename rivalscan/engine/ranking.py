"""Ranked views over the scored peer list.

rank_by is a stable descending sort; equal scores keep input order, which is
the only tie-break.
"""

from enum import Enum

from rivalscan.errors import InvariantViolation
from rivalscan.models.venue import VenueRecord

NEARBY_RADIUS_KM = 5.0

# Emerging venue heuristic: well rated but not yet saturated with reviews
EMERGING_MIN_RATING = 3.5
EMERGING_MAX_REVIEWS = 120


class ScoreSelector(Enum):
    THREAT = "threat_score"
    CATEGORY_THREAT = "category_threat_score"


def rank_by(venues: list[VenueRecord], key: ScoreSelector, limit: int) -> list[VenueRecord]:
    if limit <= 0:
        return []
    for venue in venues:
        if getattr(venue, key.value) is None:
            raise InvariantViolation(f"rank_by called on unscored venue: {venue.name!r}")
    ranked = sorted(venues, key=lambda v: getattr(v, key.value), reverse=True)
    return ranked[:limit]


def top_competitors(venues: list[VenueRecord], limit: int = 5) -> list[VenueRecord]:
    """Highest general threat, no distance filter."""
    return rank_by(venues, ScoreSelector.THREAT, limit)


def same_category_nearby(
    venues: list[VenueRecord],
    primary_category: str,
    limit: int = 5,
    max_distance_km: float = NEARBY_RADIUS_KM,
) -> list[VenueRecord]:
    """Same assigned category within ``max_distance_km``, by category threat."""
    candidates = []
    for venue in venues:
        if venue.distance_km is None or venue.assigned_category is None:
            raise InvariantViolation(
                f"same_category_nearby needs scored, classified venues: {venue.name!r}"
            )
        if venue.distance_km <= max_distance_km and venue.assigned_category == primary_category:
            candidates.append(venue)
    return rank_by(candidates, ScoreSelector.CATEGORY_THREAT, limit)


def emerging_venues(
    venues: list[VenueRecord],
    limit: int = 5,
    min_rating: float = EMERGING_MIN_RATING,
    max_reviews: int = EMERGING_MAX_REVIEWS,
) -> list[VenueRecord]:
    """Newly popular venues, in input order.

    Review count stands in for venue age; the data source has no opening date.
    """
    if limit <= 0:
        return []
    matches = [v for v in venues if v.rating > min_rating and v.review_count < max_reviews]
    return matches[:limit]
