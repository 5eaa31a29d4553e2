"""
Catalog fetching, normalization and the get-movie fallback
"""
import json

import httpx
import pytest

from moviehub.config import PLACEHOLDER_POSTER
from moviehub.schemas.movie import Movie, normalize_gallery
from moviehub.services.api_client import MovieHubAPI
from moviehub.services.catalog_service import CatalogService, normalize_movie, normalize_movies
from tests.fake_service import FakeMovieHub


def catalog_for(service: FakeMovieHub, cache_ttl: int = 300) -> CatalogService:
    api = MovieHubAPI(base_url="http://testserver", transport=httpx.ASGITransport(app=service.app))
    return CatalogService(api, cache_ttl=cache_ttl)


# ============================================
# Normalization boundary
# ============================================

class TestNormalization:

    def test_gallery_json_string_is_decoded(self):
        assert normalize_gallery(json.dumps(["a.jpg", "b.jpg"])) == ["a.jpg", "b.jpg"]

    @pytest.mark.parametrize("raw", [None, "not-json", '{"a": 1}', 42, {"a": 1}, "null"])
    def test_gallery_unusable_input_becomes_empty(self, raw):
        assert normalize_gallery(raw) == []

    def test_gallery_list_drops_non_strings(self):
        assert normalize_gallery(["a.jpg", None, 3, "", "b.jpg"]) == ["a.jpg", "b.jpg"]

    def test_wire_record_maps_to_movie(self):
        movie = normalize_movie({
            "id": 7,
            "movieName": "Heat",
            "releaseYear": "1995",
            "imdbRating": "8.3",
            "genre": "Crime, Drama",
            "producer": "Michael Mann",
            "cast": [{"id": 1, "name": "Al Pacino"}, {"id": 2}, "junk"],
            "gallery": '["h.jpg"]',
        })
        assert movie.id == "7"
        assert movie.title == "Heat"
        assert movie.release_year == 1995
        assert movie.rating == 8.3
        assert movie.genre_tags == ("Crime", "Drama")
        assert movie.cast_names == ["Al Pacino"]
        assert movie.gallery == ["h.jpg"]
        assert movie.poster_url == PLACEHOLDER_POSTER
        assert movie.trailer_url is None

    @pytest.mark.parametrize("raw_rating", ["abc", 11, -1, ""])
    def test_out_of_range_rating_is_undefined(self, raw_rating):
        assert normalize_movie({"id": 1, "imdbRating": raw_rating}).rating is None

    def test_unparsable_year_is_undefined(self):
        assert normalize_movie({"id": 1, "releaseYear": "soon"}).release_year is None

    @pytest.mark.parametrize("raw", [{"movieName": "No id"}, {"id": ""}, None, "text", 3])
    def test_records_without_identifier_are_rejected(self, raw):
        assert normalize_movie(raw) is None

    def test_single_record_payload_is_wrapped(self):
        movies = normalize_movies({"id": 9, "movieName": "Solo"})
        assert [m.id for m in movies] == ["9"]

    def test_movie_is_immutable(self):
        movie = normalize_movie({"id": 1})
        with pytest.raises(Exception):
            movie.title = "changed"


# ============================================
# fetch_all
# ============================================

class TestFetchAll:

    async def test_skips_malformed_records(self, fake_service):
        catalog = catalog_for(fake_service)
        movies = await catalog.fetch_all()

        assert [m.id for m in movies] == ["1", "2", "3", "4", "5"]
        assert all(isinstance(m, Movie) for m in movies)
        by_id = {m.id: m for m in movies}
        assert by_id["1"].gallery == ["https://img.example/i1.jpg", "https://img.example/i2.jpg"]
        assert by_id["2"].gallery == ["https://img.example/d1.jpg"]
        assert by_id["3"].gallery == []
        assert by_id["4"].gallery == []
        assert by_id["5"].genre == ""

    async def test_catalog_is_fetched_once(self, fake_service):
        catalog = catalog_for(fake_service)
        await catalog.fetch_all()
        await catalog.fetch_all()
        assert fake_service.calls.count(("GET", "/movies")) == 1

    async def test_concurrent_first_calls_share_one_request(self, fake_service):
        import asyncio

        catalog = catalog_for(fake_service)
        results = await asyncio.gather(*(catalog.fetch_all() for _ in range(5)))
        assert all(len(movies) == 5 for movies in results)
        assert fake_service.calls.count(("GET", "/movies")) == 1

    async def test_refresh_refetches(self, fake_service):
        catalog = catalog_for(fake_service)
        await catalog.fetch_all()
        catalog.refresh()
        await catalog.fetch_all()
        assert fake_service.calls.count(("GET", "/movies")) == 2

    async def test_remote_failure_degrades_to_empty(self, fake_service):
        fake_service.fail("GET", "/movies", 500)
        catalog = catalog_for(fake_service)
        assert await catalog.fetch_all() == []

    async def test_failure_is_not_cached(self, fake_service):
        fake_service.fail("GET", "/movies", 503)
        catalog = catalog_for(fake_service)
        assert await catalog.fetch_all() == []

        fake_service.failures.clear()
        assert len(await catalog.fetch_all()) == 5

    async def test_empty_payload_degrades_to_empty(self):
        catalog = catalog_for(FakeMovieHub(movies=[]))
        assert await catalog.fetch_all() == []

    async def test_network_failure_degrades_to_empty(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = MovieHubAPI(base_url="http://testserver", transport=httpx.MockTransport(unreachable))
        catalog = CatalogService(api)
        assert await catalog.fetch_all() == []


# ============================================
# get_movie
# ============================================

class TestGetMovie:

    async def test_direct_lookup(self, fake_service):
        catalog = catalog_for(fake_service)
        movie = await catalog.get_movie("2")
        assert movie.title == "The Dark Knight"
        assert not fake_service.called("GET", "/movies")

    async def test_falls_back_to_catalog_scan(self, fake_service):
        fake_service.fail("GET", "/movies/3", 404)
        catalog = catalog_for(fake_service)

        movie = await catalog.get_movie(3)

        assert movie.title == "Titanic"
        assert fake_service.called("GET", "/movies")

    async def test_unknown_movie_returns_none(self, fake_service):
        catalog = catalog_for(fake_service)
        assert await catalog.get_movie("999") is None
