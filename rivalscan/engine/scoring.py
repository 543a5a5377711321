"""Threat scoring engine.

General threat score (0-100):
  Rating:     0-40  linear in rating
  Reviews:    0-30  log10 of review count, saturates at 10,000 reviews
  Proximity:  0-30  linear decay to zero at 7 km

Category threat score (0-100):
  Proximity:  0-35  step function (two doors down != 2 km away)
  Rating:     0-25
  Reviews:    0-20
  Category:   20 for a same-category venue, else 0

Pure functions. No I/O.
"""

import math
from dataclasses import replace

from rivalscan.engine.geo import distance_km
from rivalscan.engine.rounding import round_half_up, round_half_up_int
from rivalscan.models.venue import Coordinate, VenueRecord

PROXIMITY_DECAY_KM = 7.0
REVIEW_SATURATION_LOG10 = 4  # 10,000 reviews
CATEGORY_BONUS = 20

# (max distance km, points), checked in order
CATEGORY_PROXIMITY_STEPS = (
    (0.5, 35),
    (1.0, 32),
    (2.0, 27),
    (3.0, 20),
    (5.0, 12),
)


def _review_points(review_count: int, weight: float) -> float:
    return min(weight, (math.log10(max(1, review_count)) / REVIEW_SATURATION_LOG10) * weight)


def _category_proximity_points(dist_km: float) -> float:
    for max_km, points in CATEGORY_PROXIMITY_STEPS:
        if dist_km <= max_km:
            return points
    return max(0.0, 5 - dist_km)


def general_threat_score(rating: float, review_count: int, dist_km: float) -> int:
    """Overall competitive strength of a venue, regardless of category."""
    rating_points = (rating / 5) * 40
    review_points = _review_points(review_count, 30)
    proximity_points = max(0.0, 30 * (1 - dist_km / PROXIMITY_DECAY_KM))

    total = rating_points + review_points + proximity_points
    return max(0, min(100, round_half_up_int(total)))


def category_threat_score(
    rating: float,
    review_count: int,
    dist_km: float,
    same_category: bool,
) -> int:
    """Threat from a venue competing for the same search intent.

    The category bonus is added after rounding so that toggling
    ``same_category`` always moves the score by exactly 20.
    """
    base = (
        _category_proximity_points(dist_km)
        + (rating / 5) * 25
        + _review_points(review_count, 20)
    )
    bonus = CATEGORY_BONUS if same_category else 0
    return max(0, min(100, round_half_up_int(base) + bonus))


def score_venue(venue: VenueRecord, origin: Coordinate, same_category: bool) -> VenueRecord:
    """Return a scored copy of ``venue``.

    Scores use the exact distance; the stored distance is rounded to 2 decimals.
    """
    dist = distance_km(origin, venue.location)
    return replace(
        venue,
        distance_km=round_half_up(dist, 2),
        threat_score=general_threat_score(venue.rating, venue.review_count, dist),
        category_threat_score=category_threat_score(
            venue.rating, venue.review_count, dist, same_category,
        ),
    )


def average_threat_score(venues: list[VenueRecord]) -> int:
    """Half-up rounded mean general threat score, 0 for an empty list."""
    scores = [v.threat_score for v in venues if v.threat_score is not None]
    if not scores:
        return 0
    return round_half_up_int(sum(scores) / len(scores))
