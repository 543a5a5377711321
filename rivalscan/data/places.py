"""Google Maps client: geocoding and nearby venue search.

This is the ingestion boundary. Raw Places results are converted to
VenueRecords here, with every optional field given a concrete default, so
the engine never sees a missing rating or price level.

Docs: https://developers.google.com/maps/documentation/places/web-service/search-nearby
"""

import asyncio
import logging

import httpx

from rivalscan.config import settings
from rivalscan.data.cache import cached_payload
from rivalscan.errors import BusinessNotFound, DataSourceUnavailable
from rivalscan.models.venue import Coordinate, PriceLevel, VenueRecord

logger = logging.getLogger(__name__)

PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

# Google caps nearby search at 3 pages of 20
MAX_NEARBY_RESULTS = 60
# Google requires a short delay before a next_page_token becomes valid
PAGE_TOKEN_DELAY_SECONDS = 2.0


def parse_place(raw: dict) -> VenueRecord | None:
    """Convert one nearbysearch result into a VenueRecord. Nameless results are dropped."""
    name = (raw.get("name") or "").strip()
    if not name:
        return None

    location = raw.get("geometry", {}).get("location", {})
    return VenueRecord(
        name=name,
        address=raw.get("vicinity") or raw.get("formatted_address") or "",
        location=Coordinate(
            latitude=float(location.get("lat", 0.0)),
            longitude=float(location.get("lng", 0.0)),
        ),
        rating=float(raw.get("rating") or 0.0),
        review_count=int(raw.get("user_ratings_total") or 0),
        category_tags=frozenset(raw.get("types") or ()),
        photo_count=len(raw.get("photos") or ()),
        price_level=PriceLevel.from_raw(raw.get("price_level")),
        venue_id=raw.get("place_id", ""),
    )


class GooglePlacesClient:
    def __init__(self, api_key: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = api_key or settings.google_maps_api_key
        self._transport = transport

    async def _get(self, url: str, params: dict) -> dict:
        if not self.api_key:
            raise DataSourceUnavailable("Google Maps API key not configured")
        try:
            async with httpx.AsyncClient(timeout=15.0, transport=self._transport) as client:
                resp = await client.get(url, params={**params, "key": self.api_key})
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as e:
            raise DataSourceUnavailable(f"Google Maps request failed: {e}") from e
        except ValueError as e:
            raise DataSourceUnavailable(f"Google Maps returned invalid JSON: {e}") from e

    @cached_payload("places:geocode")
    async def _geocode_location(self, query: str) -> dict:
        data = await self._get(GEOCODE_URL, {"address": query})
        status = data.get("status")

        if status == "ZERO_RESULTS" or (status == "OK" and not data.get("results")):
            raise BusinessNotFound(f"No geocoding match for {query!r}")
        if status != "OK":
            error_msg = data.get("error_message", status or "Unknown error")
            raise DataSourceUnavailable(f"Geocoding error for {query!r}: {error_msg}")

        return data["results"][0]["geometry"]["location"]

    async def geocode(self, query: str) -> Coordinate:
        """Best-match coordinate for a free-text address or "name, city"."""
        location = await self._geocode_location(query)
        return Coordinate(latitude=float(location["lat"]), longitude=float(location["lng"]))

    @cached_payload("places:nearby")
    async def _nearby_results(
        self, latitude: float, longitude: float, radius_m: int, max_results: int,
    ) -> list[dict]:
        params = {
            "location": f"{latitude},{longitude}",
            "radius": radius_m,
            "type": "restaurant",
        }
        url = f"{PLACES_BASE_URL}/nearbysearch/json"
        results: list[dict] = []

        while len(results) < max_results:
            data = await self._get(url, params)
            status = data.get("status")
            if status == "ZERO_RESULTS":
                break
            if status != "OK":
                error_msg = data.get("error_message", status or "Unknown error")
                raise DataSourceUnavailable(f"Places API error: {error_msg}")

            results.extend(data.get("results", []))

            next_page_token = data.get("next_page_token")
            if not next_page_token or len(results) >= max_results:
                break
            await asyncio.sleep(PAGE_TOKEN_DELAY_SECONDS)
            params = {"pagetoken": next_page_token}

        return results[:max_results]

    async def search_nearby(
        self,
        location: Coordinate,
        radius_m: int,
        max_results: int = MAX_NEARBY_RESULTS,
    ) -> list[VenueRecord]:
        """Venues within ``radius_m`` of ``location``. An empty list is a valid answer."""
        raw_results = await self._nearby_results(
            location.latitude, location.longitude, radius_m, max_results,
        )
        venues = [v for v in (parse_place(r) for r in raw_results) if v is not None]
        logger.info(
            "Places nearby search at %.5f,%.5f (%dm): %d venues",
            location.latitude, location.longitude, radius_m, len(venues),
        )
        return venues
