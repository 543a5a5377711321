"""Protocol definitions for the analysis collaborators.

Each protocol defines the interface a concrete implementation must satisfy.
"""

from typing import Protocol, runtime_checkable

from rivalscan.models.commentary import MarketCommentary
from rivalscan.models.report import ReportRecord
from rivalscan.models.venue import Coordinate, TargetBusiness, VenueRecord


@runtime_checkable
class GeocodeSource(Protocol):
    async def geocode(self, query: str) -> Coordinate:
        """Best-match coordinate for a free-text query."""
        ...


@runtime_checkable
class VenueSource(Protocol):
    async def search_nearby(self, location: Coordinate, radius_m: int) -> list[VenueRecord]:
        """Raw venue observations around a point. May be empty."""
        ...


@runtime_checkable
class PlacesSource(GeocodeSource, VenueSource, Protocol):
    """Geocoding and venue search from one provider."""


@runtime_checkable
class CommentarySource(Protocol):
    async def generate(
        self,
        target: TargetBusiness,
        top_competitors: list[VenueRecord],
        peers: list[VenueRecord],
    ) -> MarketCommentary:
        """Structured commentary, including the name -> category map for ``peers``."""
        ...


@runtime_checkable
class ReportStore(Protocol):
    async def save(self, report: ReportRecord) -> str:
        """Persist a finished report, returning its identifier."""
        ...

    async def get(self, report_id: str) -> dict | None:
        """Load a stored report blob."""
        ...
