"""Peer filtering: drop venues that do not compete with the target.

Two checks, either one excludes a venue:
  - any raw category tag in EXCLUDED_TYPES (lodging-class places)
  - a name matching EXCLUDED_NAME_PATTERN (lodging that the source tags as food)
"""

import re

from rivalscan.models.venue import VenueRecord

EXCLUDED_TYPES = frozenset({
    "lodging",
    "hotel",
    "motel",
    "campground",
    "rv_park",
})

EXCLUDED_NAME_PATTERN = re.compile(
    r"\b(lodge|lodging|hotel|motel|resort|inn|hostel|dharamshala|guest\s*house|paying\s*guest|pg)\b",
    re.IGNORECASE,
)


def is_peer(venue: VenueRecord) -> bool:
    if venue.category_tags & EXCLUDED_TYPES:
        return False
    if EXCLUDED_NAME_PATTERN.search(venue.name):
        return False
    return True


def filter_peers(venues: list[VenueRecord]) -> list[VenueRecord]:
    """Order-preserving. An empty result is valid; the caller decides what it means."""
    return [v for v in venues if is_peer(v)]
