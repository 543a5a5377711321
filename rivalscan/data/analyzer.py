"""Competitor analyzer: orchestrates data sources into a finished report.

Flow: "name, city" -> geocode (city-only fallback) -> nearby venues
-> identify the target among them -> ReportAssembler -> optional save
"""

import logging

from rivalscan.config import settings
from rivalscan.data.base import PlacesSource, ReportStore
from rivalscan.engine.assembler import ReportAssembler
from rivalscan.errors import BusinessNotFound, DataSourceUnavailable
from rivalscan.models.report import ReportRecord
from rivalscan.models.venue import Coordinate, TargetBusiness, VenueRecord

logger = logging.getLogger(__name__)


def find_target_index(venues: list[VenueRecord], name: str) -> int | None:
    """Index of the venue that best matches ``name``, or None.

    A candidate must contain the name (or be contained by it), case-insensitive.
    Among candidates an exact match wins, then the most shared words, then
    the earliest.
    """
    target_lower = name.lower().strip()
    if not target_lower:
        return None
    target_words = set(target_lower.split())

    best_index = None
    best_score = -1
    for i, venue in enumerate(venues):
        venue_lower = venue.name.lower().strip()
        if venue_lower == target_lower:
            return i
        if target_lower not in venue_lower and venue_lower not in target_lower:
            continue
        score = len(target_words & set(venue_lower.split()))
        if score > best_score:
            best_index, best_score = i, score
    return best_index


def identify_target(
    name: str,
    city: str,
    location: Coordinate,
    venues: list[VenueRecord],
) -> tuple[TargetBusiness, list[VenueRecord]]:
    """Build the target and the remaining candidate list.

    The matched venue supplies rating, reviews and tags and is removed from
    the candidates so the business never competes with itself.
    """
    index = find_target_index(venues, name)
    if index is None:
        logger.info("%s not found among %d nearby venues", name, len(venues))
        return TargetBusiness(name=name, city=city, location=location), list(venues)

    match = venues[index]
    logger.info("Matched %s to nearby venue %s", name, match.name)
    target = TargetBusiness(
        name=name,
        city=city,
        location=location,
        rating=match.rating,
        review_count=match.review_count,
        category_tags=match.category_tags,
    )
    return target, venues[:index] + venues[index + 1:]


class CompetitorAnalyzer:
    def __init__(
        self,
        places: PlacesSource,
        assembler: ReportAssembler,
        store: ReportStore | None = None,
        search_radius_m: int | None = None,
    ):
        self.places = places
        self.assembler = assembler
        self.store = store
        self.search_radius_m = search_radius_m or settings.search_radius_m

    async def locate(self, name: str, city: str) -> Coordinate:
        """Geocode "name, city", retrying with the city alone."""
        query = f"{name}, {city}"
        try:
            location = await self.places.geocode(query)
        except DataSourceUnavailable as e:
            logger.warning("Geocoding %r failed (%s), falling back to city %r", query, e, city)
            try:
                location = await self.places.geocode(city)
            except BusinessNotFound as city_error:
                raise BusinessNotFound(f"Could not geocode {query!r} or {city!r}") from city_error

        logger.info("Geocoded %s -> %.5f, %.5f", query, location.latitude, location.longitude)
        return location

    async def analyze(self, name: str, city: str) -> ReportRecord:
        """Run the full pipeline for one business. Nothing is persisted."""
        location = await self.locate(name, city)

        venues = await self.places.search_nearby(location, self.search_radius_m)
        logger.info("Fetched %d venues within %dm of %s", len(venues), self.search_radius_m, name)

        target, candidates = identify_target(name, city, location, venues)
        return await self.assembler.assemble(target, candidates)

    async def analyze_and_save(self, name: str, city: str) -> tuple[str, ReportRecord]:
        report = await self.analyze(name, city)
        if self.store is None:
            raise RuntimeError("CompetitorAnalyzer has no report store")
        report_id = await self.store.save(report)
        return report_id, report


def build_assembler(commentary_source) -> ReportAssembler:
    """ReportAssembler configured from settings."""
    return ReportAssembler(
        commentary_source,
        fallback_category=settings.fallback_category,
        nearby_radius_km=settings.nearby_radius_km,
        top_limit=settings.top_competitors_limit,
        same_category_limit=settings.same_category_limit,
        emerging_limit=settings.emerging_limit,
        breakdown_limit=settings.category_breakdown_limit,
    )
