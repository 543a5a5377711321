from unittest.mock import AsyncMock, patch

import httpx
import pytest

from rivalscan.data.places import GooglePlacesClient, parse_place
from rivalscan.errors import BusinessNotFound, DataSourceUnavailable
from rivalscan.models.venue import Coordinate, PriceLevel

ORIGIN = Coordinate(17.4239, 78.4738)

BAWARCHI = {
    "name": "Bawarchi",
    "place_id": "ChIJ-bawarchi",
    "vicinity": "RTC X Roads, Hyderabad",
    "geometry": {"location": {"lat": 17.4259, "lng": 78.4738}},
    "rating": 4.3,
    "user_ratings_total": 45000,
    "types": ["restaurant", "food", "point_of_interest", "establishment"],
    "photos": [{"photo_reference": "a"}, {"photo_reference": "b"}],
    "price_level": 2,
}


def _client(handler) -> GooglePlacesClient:
    return GooglePlacesClient(api_key="test-key", transport=httpx.MockTransport(handler))


class TestParsePlace:
    def test_full_record(self):
        venue = parse_place(BAWARCHI)
        assert venue.name == "Bawarchi"
        assert venue.venue_id == "ChIJ-bawarchi"
        assert venue.address == "RTC X Roads, Hyderabad"
        assert venue.location == Coordinate(17.4259, 78.4738)
        assert venue.review_count == 45000
        assert venue.photo_count == 2
        assert venue.price_level is PriceLevel.MODERATE
        assert "restaurant" in venue.category_tags

    def test_missing_fields_default(self):
        venue = parse_place({"name": "New Place", "geometry": {"location": {"lat": 1.0, "lng": 2.0}}})
        assert venue.rating == 0.0
        assert venue.review_count == 0
        assert venue.photo_count == 0
        assert venue.price_level is PriceLevel.UNKNOWN
        assert venue.address == ""
        assert venue.category_tags == frozenset()
        assert venue.venue_id == ""

    def test_nameless_dropped(self):
        assert parse_place({"name": "  ", "rating": 4.0}) is None
        assert parse_place({}) is None


class TestGeocode:
    async def test_ok(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["address"] == "Paradise Biryani, Hyderabad"
            assert request.url.params["key"] == "test-key"
            return httpx.Response(200, json={
                "status": "OK",
                "results": [{"geometry": {"location": {"lat": 17.4239, "lng": 78.4738}}}],
            })

        location = await _client(handler).geocode("Paradise Biryani, Hyderabad")
        assert location == ORIGIN

    async def test_zero_results(self):
        client = _client(lambda r: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))
        with pytest.raises(BusinessNotFound):
            await client.geocode("Nowhere")

    async def test_denied(self):
        client = _client(lambda r: httpx.Response(200, json={
            "status": "REQUEST_DENIED", "error_message": "bad key",
        }))
        with pytest.raises(DataSourceUnavailable, match="bad key"):
            await client.geocode("Hyderabad")

    async def test_http_error(self):
        client = _client(lambda r: httpx.Response(500))
        with pytest.raises(DataSourceUnavailable):
            await client.geocode("Hyderabad")

    async def test_missing_key(self):
        client = GooglePlacesClient(api_key="")
        client.api_key = ""
        with pytest.raises(DataSourceUnavailable, match="not configured"):
            await client.geocode("Hyderabad")


class TestSearchNearby:
    async def test_single_page(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/nearbysearch/json")
            assert request.url.params["location"] == "17.4239,78.4738"
            assert request.url.params["radius"] == "7000"
            assert request.url.params["type"] == "restaurant"
            return httpx.Response(200, json={"status": "OK", "results": [BAWARCHI, {"name": ""}]})

        venues = await _client(handler).search_nearby(ORIGIN, 7000)
        assert [v.name for v in venues] == ["Bawarchi"]

    async def test_zero_results_is_empty(self):
        client = _client(lambda r: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))
        assert await client.search_nearby(ORIGIN, 7000) == []

    async def test_error_status(self):
        client = _client(lambda r: httpx.Response(200, json={"status": "OVER_QUERY_LIMIT"}))
        with pytest.raises(DataSourceUnavailable):
            await client.search_nearby(ORIGIN, 7000)

    async def test_follows_next_page_token(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(dict(request.url.params))
            if "pagetoken" in request.url.params:
                return httpx.Response(200, json={"status": "OK", "results": [{**BAWARCHI, "name": "Page Two"}]})
            return httpx.Response(200, json={"status": "OK", "results": [BAWARCHI], "next_page_token": "tok"})

        with patch("rivalscan.data.places.asyncio.sleep", new=AsyncMock()) as sleep:
            venues = await _client(handler).search_nearby(ORIGIN, 7000)

        assert [v.name for v in venues] == ["Bawarchi", "Page Two"]
        assert calls[1]["pagetoken"] == "tok"
        sleep.assert_awaited_once()

    async def test_max_results(self):
        page = [{**BAWARCHI, "name": f"V{i}"} for i in range(20)]
        client = _client(lambda r: httpx.Response(200, json={"status": "OK", "results": page, "next_page_token": "t"}))
        venues = await client.search_nearby(ORIGIN, 7000, max_results=5)
        assert len(venues) == 5
