"""Venue and target-business data types.

Venues are immutable after ingestion. Scoring and classification return
annotated copies via ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


class PriceLevel(Enum):
    UNKNOWN = -1
    FREE = 0
    INEXPENSIVE = 1
    MODERATE = 2
    EXPENSIVE = 3
    VERY_EXPENSIVE = 4

    @classmethod
    def from_raw(cls, value: int | None) -> "PriceLevel":
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UNKNOWN


# Baseline used when the source gives no price level (or level 0)
BASELINE_AVERAGE_PRICE = 400
PRICE_PER_LEVEL = 200


@dataclass(frozen=True)
class VenueRecord:
    name: str
    location: Coordinate
    address: str = ""
    rating: float = 0.0  # 0-5, 0 = unrated
    review_count: int = 0
    category_tags: frozenset[str] = field(default_factory=frozenset)
    photo_count: int = 0
    price_level: PriceLevel = PriceLevel.UNKNOWN
    venue_id: str = ""  # source place id, may be empty

    # Derived by the scoring engine
    distance_km: float | None = None
    threat_score: int | None = None
    category_threat_score: int | None = None

    # Set by the classification merge
    assigned_category: str | None = None

    @property
    def is_scored(self) -> bool:
        return (
            self.distance_km is not None
            and self.threat_score is not None
            and self.category_threat_score is not None
        )

    @property
    def is_classified(self) -> bool:
        return self.assigned_category is not None

    @property
    def estimated_average_price(self) -> int:
        if self.price_level in (PriceLevel.UNKNOWN, PriceLevel.FREE):
            return BASELINE_AVERAGE_PRICE
        return self.price_level.value * PRICE_PER_LEVEL


@dataclass(frozen=True)
class TargetBusiness:
    name: str
    city: str
    location: Coordinate
    rating: float = 0.0
    review_count: int = 0
    category_tags: frozenset[str] = field(default_factory=frozenset)
    primary_category: str = ""
