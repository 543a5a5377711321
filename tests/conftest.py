"""Canonical test fixtures used across engine, data and API tests.

Fixture: "Paradise Biryani" in Hyderabad (4.1 stars, 12,000 reviews) with six
nearby restaurants between 0.2 km and 11 km away.
"""

import pytest

from rivalscan.config import settings
from rivalscan.engine.assembler import build_report, score_peers
from rivalscan.models.commentary import (
    CompetitorEnhancement,
    ExecutiveSummary,
    KeywordCluster,
    MarketCommentary,
)
from rivalscan.models.venue import Coordinate, PriceLevel, TargetBusiness, VenueRecord

ORIGIN = Coordinate(latitude=17.4239, longitude=78.4738)


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Tests never talk to a real Redis; empty REDIS_URL disables caching."""
    monkeypatch.setattr(settings, "redis_url", "")


@pytest.fixture
def canonical_target() -> TargetBusiness:
    return TargetBusiness(
        name="Paradise Biryani",
        city="Hyderabad",
        location=ORIGIN,
        rating=4.1,
        review_count=12000,
        category_tags=frozenset({
            "restaurant", "indian_restaurant", "food", "point_of_interest", "establishment",
        }),
    )


@pytest.fixture
def canonical_peers() -> list[VenueRecord]:
    """Unscored peers, already free of lodging. Every 0.001 deg of latitude is ~0.11 km."""
    return [
        VenueRecord(
            name="Bawarchi",
            location=Coordinate(17.4259, 78.4738),  # ~0.22 km
            rating=4.3,
            review_count=45000,
            category_tags=frozenset({"restaurant", "indian_restaurant", "food", "establishment"}),
            photo_count=10,
            price_level=PriceLevel.MODERATE,
        ),
        VenueRecord(
            name="Pizza Hut",
            location=Coordinate(17.4339, 78.4738),  # ~1.1 km
            rating=4.0,
            review_count=3200,
            category_tags=frozenset({"restaurant", "pizza_restaurant", "food"}),
            photo_count=5,
            price_level=PriceLevel.MODERATE,
        ),
        VenueRecord(
            name="Cafe Niloufer",
            location=Coordinate(17.4439, 78.4738),  # ~2.2 km
            rating=4.6,
            review_count=25000,
            category_tags=frozenset({"cafe", "food"}),
            photo_count=8,
            price_level=PriceLevel.INEXPENSIVE,
        ),
        VenueRecord(
            name="Chutneys",
            location=Coordinate(17.4239, 78.4838),  # ~1.06 km
            rating=4.2,
            review_count=9000,
            category_tags=frozenset({"restaurant", "indian_restaurant", "food"}),
        ),
        VenueRecord(
            name="New Dosa Corner",
            location=Coordinate(17.4639, 78.4738),  # ~4.4 km
            rating=4.5,
            review_count=80,
            category_tags=frozenset({"restaurant", "food"}),
            photo_count=1,
        ),
        VenueRecord(
            name="Far Away Dhaba",
            location=Coordinate(17.5239, 78.4738),  # ~11 km
            rating=3.9,
            review_count=600,
            category_tags=frozenset({"restaurant"}),
        ),
    ]


@pytest.fixture
def scored_peers(canonical_target, canonical_peers) -> list[VenueRecord]:
    return score_peers(canonical_target, canonical_peers)


@pytest.fixture
def canonical_commentary() -> MarketCommentary:
    """Classifies every canonical peer except "Far Away Dhaba"."""
    return MarketCommentary(
        executive_summary=ExecutiveSummary(
            overview="Dense biryani market.",
            key_findings=["a", "b", "c", "d"],
            recommendation="Push delivery.",
        ),
        your_keyword_cluster=KeywordCluster(primary=["biryani"], positive=["authentic"], negative=["oily"]),
        category_classification={
            "Bawarchi": "Biryani",
            "Pizza Hut": "Pizza",
            "Cafe Niloufer": "Cafe",
            "Chutneys": "South Indian",
            "New Dosa Corner": "South Indian",
        },
        target_category="Biryani",
        competitor_enhancements=[
            CompetitorEnhancement(
                restaurant="Bawarchi",
                strengths=["portion size"],
                weaknesses=["seating"],
                sentiment_label="Positive",
                sentiment_score=0.8,
            ),
        ],
    )


@pytest.fixture
def canonical_report(canonical_target, scored_peers, canonical_commentary):
    return build_report(canonical_target, scored_peers, canonical_commentary)
