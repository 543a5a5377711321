"""Per-category statistics over the classified peer list.

Pure fold: accumulators live only inside aggregate_by_category and the
result is a list of frozen CategoryAggregate records.
"""

from dataclasses import dataclass

from rivalscan.engine.rounding import round_half_up
from rivalscan.errors import InvariantViolation
from rivalscan.models.report import CategoryAggregate, NamedRating, NamedReviewCount
from rivalscan.models.venue import VenueRecord


@dataclass
class _Accumulator:
    category: str
    count: int = 0
    total_review_votes: int = 0
    rating_sum: float = 0.0
    venues_with_photos: int = 0
    highest: VenueRecord | None = None
    lowest: VenueRecord | None = None
    most_reviewed: VenueRecord | None = None

    def add(self, venue: VenueRecord) -> None:
        self.count += 1
        self.total_review_votes += venue.review_count
        self.rating_sum += venue.rating
        if venue.photo_count > 0:
            self.venues_with_photos += 1

        # Strict comparisons: ties keep the earlier venue
        if self.highest is None or venue.rating > self.highest.rating:
            self.highest = venue
        if venue.rating > 0 and (self.lowest is None or venue.rating < self.lowest.rating):
            self.lowest = venue
        if self.most_reviewed is None or venue.review_count > self.most_reviewed.review_count:
            self.most_reviewed = venue

    def freeze(self) -> CategoryAggregate:
        highest = self.highest
        lowest = self.lowest
        most = self.most_reviewed
        return CategoryAggregate(
            category=self.category,
            count=self.count,
            total_review_votes=self.total_review_votes,
            average_rating=round_half_up(self.rating_sum / self.count, 1),
            venues_with_photos=self.venues_with_photos,
            highest_rated=NamedRating(highest.name, highest.rating) if highest else NamedRating(),
            lowest_rated=NamedRating(lowest.name, lowest.rating) if lowest else NamedRating(),
            most_reviewed=(
                NamedReviewCount(most.name, most.review_count) if most else NamedReviewCount()
            ),
        )


def aggregate_by_category(venues: list[VenueRecord]) -> list[CategoryAggregate]:
    """Group classified venues by assigned category.

    Sorted by total review votes, descending; equal totals keep first-seen
    category order. Truncating to a top-N view is left to the caller.
    """
    groups: dict[str, _Accumulator] = {}
    for venue in venues:
        if venue.assigned_category is None:
            raise InvariantViolation(
                f"aggregate_by_category called before classification: {venue.name!r}"
            )
        acc = groups.get(venue.assigned_category)
        if acc is None:
            acc = groups[venue.assigned_category] = _Accumulator(venue.assigned_category)
        acc.add(venue)

    aggregates = [acc.freeze() for acc in groups.values()]
    aggregates.sort(key=lambda a: a.total_review_votes, reverse=True)
    return aggregates
