"""Report data types: category aggregates, standing, and the final report record."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rivalscan.models.commentary import CompetitorEnhancement, MarketCommentary
from rivalscan.models.venue import TargetBusiness, VenueRecord


class ThreatLevel(Enum):
    HIGH = "High"  # 75-100
    MEDIUM = "Medium"  # 50-74
    LOW = "Low"  # 0-49

    @classmethod
    def for_score(cls, score: int) -> "ThreatLevel":
        if score >= 75:
            return cls.HIGH
        if score >= 50:
            return cls.MEDIUM
        return cls.LOW


class MarketThreatLevel(Enum):
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"

    @classmethod
    def for_average(cls, average_score: int) -> "MarketThreatLevel":
        if average_score >= 70:
            return cls.HIGH
        if average_score >= 45:
            return cls.MODERATE
        return cls.LOW


@dataclass(frozen=True)
class NamedRating:
    name: str = ""
    rating: float = 0.0


@dataclass(frozen=True)
class NamedReviewCount:
    name: str = ""
    review_count: int = 0


@dataclass(frozen=True)
class CategoryAggregate:
    category: str
    count: int
    total_review_votes: int
    average_rating: float  # 1 decimal
    venues_with_photos: int
    highest_rated: NamedRating
    lowest_rated: NamedRating  # ignores unrated venues
    most_reviewed: NamedReviewCount


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    name: str
    rating: float
    review_count: int
    is_target: bool = False


@dataclass(frozen=True)
class PercentileStanding:
    review_percentile: int = 0
    rating_percentile: int = 0
    rank: int = 1
    total: int = 1
    competitors_above: int = 0
    top_ranked: tuple[RankedEntry, ...] = ()


@dataclass(frozen=True)
class CompetitorProfile:
    """A top competitor with the commentary merged onto it (if any)."""
    venue: VenueRecord
    enhancement: CompetitorEnhancement | None = None


@dataclass(frozen=True)
class ReportRecord:
    target: TargetBusiness
    base_category_types: tuple[str, ...]
    peers: tuple[VenueRecord, ...]
    top_competitors: tuple[CompetitorProfile, ...]
    same_category_nearby: tuple[VenueRecord, ...]
    emerging_venues: tuple[VenueRecord, ...]
    category_breakdown: tuple[CategoryAggregate, ...]
    standing: PercentileStanding
    average_threat_score: int
    overall_threat_level: MarketThreatLevel
    commentary: MarketCommentary
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """JSON-ready blob in the shape the presentation layer reads."""
        commentary = self.commentary
        return {
            "restaurantName": self.target.name,
            "restaurantCity": self.target.city,
            "primaryCategory": self.target.primary_category,
            "baseCategoryTypes": list(self.base_category_types),
            "executiveSummary": commentary.executive_summary.model_dump(by_alias=True),
            "yourKeywordCluster": commentary.your_keyword_cluster.model_dump(by_alias=True),
            "competitorKeywordClusters": [
                c.model_dump(by_alias=True) for c in commentary.competitor_keyword_clusters
            ],
            "finalStrategicVerdict": commentary.final_strategic_verdict,
            "competitorAnalysis": {
                "topCompetitors": [_profile_dict(p) for p in self.top_competitors],
                "sameCategoryNearby": [_venue_dict(v) for v in self.same_category_nearby],
                "emergingVenues": [_venue_dict(v) for v in self.emerging_venues],
                "categoryBreakdown": [_aggregate_dict(a) for a in self.category_breakdown],
                "overallThreatLevel": self.overall_threat_level.value,
                "averageThreatScore": self.average_threat_score,
                "peerCount": len(self.peers),
            },
            "standing": {
                "reviewPercentile": self.standing.review_percentile,
                "ratingPercentile": self.standing.rating_percentile,
                "rank": self.standing.rank,
                "total": self.standing.total,
                "competitorsAbove": self.standing.competitors_above,
                "topRanked": [
                    {
                        "rank": e.rank,
                        "name": e.name,
                        "rating": e.rating,
                        "reviews": e.review_count,
                        "isTarget": e.is_target,
                    }
                    for e in self.standing.top_ranked
                ],
            },
            "generatedAt": self.generated_at.isoformat(),
        }


def _venue_dict(venue: VenueRecord) -> dict:
    threat = venue.threat_score or 0
    return {
        "name": venue.name,
        "address": venue.address,
        "rating": venue.rating,
        "totalRatings": venue.review_count,
        "distanceKm": venue.distance_km or 0.0,
        "categoryTags": sorted(venue.category_tags),
        "category": venue.assigned_category or "",
        "averagePrice": venue.estimated_average_price,
        "priceLevel": max(venue.price_level.value, 0),
        "photoCount": venue.photo_count,
        "threatScore": threat,
        "categoryThreatScore": venue.category_threat_score or 0,
        "threatLevel": ThreatLevel.for_score(threat).value,
    }


def _profile_dict(profile: CompetitorProfile) -> dict:
    data = _venue_dict(profile.venue)
    enhancement = profile.enhancement or CompetitorEnhancement(restaurant=profile.venue.name)
    data.update({
        "strengths": enhancement.strengths,
        "weaknesses": enhancement.weaknesses,
        "sentimentLabel": enhancement.sentiment_label,
        "sentimentScore": enhancement.sentiment_score,
        "whatTheyDoBetter": enhancement.what_they_do_better,
        "whereYouWin": enhancement.where_you_win,
    })
    return data


def _aggregate_dict(aggregate: CategoryAggregate) -> dict:
    return {
        "category": aggregate.category,
        "count": aggregate.count,
        "totalVotes": aggregate.total_review_votes,
        "avgRating": aggregate.average_rating,
        "withPhotos": aggregate.venues_with_photos,
        "highestRating": aggregate.highest_rated.rating,
        "highestRatingName": aggregate.highest_rated.name,
        "lowestRating": aggregate.lowest_rated.rating,
        "lowestRatingName": aggregate.lowest_rated.name,
        "mostReviews": aggregate.most_reviewed.review_count,
        "mostReviewsName": aggregate.most_reviewed.name,
    }
