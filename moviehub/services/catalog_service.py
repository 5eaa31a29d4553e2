"""
Catalog Service - fetch the movie collection once and normalize it
Never raises to callers: a missing catalog degrades to empty results
"""
from typing import Any, List, Optional
import asyncio
import logging

from pydantic import ValidationError

from moviehub.config import CATALOG_CACHE_TTL
from moviehub.errors import CatalogUnavailable, MovieHubError
from moviehub.schemas.movie import Movie
from moviehub.services.api_client import MovieHubAPI
from moviehub.utils.cache import CacheStore

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "catalog:all"


def normalize_movie(raw: Any) -> Optional[Movie]:
    """
    Turn one wire record into a Movie, or None if it has no usable shape.
    This is the only place movie payloads are shape-checked.
    """
    if isinstance(raw, Movie):
        return raw
    if not isinstance(raw, dict):
        return None
    try:
        return Movie.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Skipping malformed movie record {raw.get('id')!r}: {e.error_count()} errors")
        return None


def normalize_movies(payload: Any) -> List[Movie]:
    """Normalize a list payload (or a single record) into Movies."""
    if payload is None:
        return []
    records = payload if isinstance(payload, list) else [payload]
    movies = []
    for raw in records:
        movie = normalize_movie(raw)
        if movie is not None:
            movies.append(movie)
    return movies


class CatalogService:
    """Owns the catalog snapshot that every derived view reads"""

    def __init__(self, api: MovieHubAPI, cache_ttl: int = CATALOG_CACHE_TTL):
        self._api = api
        self._cache_ttl = cache_ttl
        self._cache = CacheStore(max_size=8)
        self._lock = asyncio.Lock()

    async def _load(self) -> List[Movie]:
        try:
            payload = await self._api.get("/movies")
        except MovieHubError as e:
            raise CatalogUnavailable(f"Movie list request failed: {e.message}") from e
        if not payload:
            raise CatalogUnavailable("Movie list response was empty")
        movies = normalize_movies(payload)
        if not movies:
            raise CatalogUnavailable("Movie list contained no usable records")
        return movies

    async def fetch_all(self) -> List[Movie]:
        """
        The full normalized catalog.

        Concurrent first callers share a single request. Failure is logged
        and yields an empty list; failures are not cached.
        """
        cached = self._cache.get(CATALOG_CACHE_KEY)
        if cached is not None:
            return list(cached)

        async with self._lock:
            cached = self._cache.get(CATALOG_CACHE_KEY)
            if cached is not None:
                return list(cached)
            try:
                movies = await self._load()
            except CatalogUnavailable as e:
                logger.error(f"Catalog unavailable: {e.message}")
                return []
            self._cache.set(CATALOG_CACHE_KEY, tuple(movies), self._cache_ttl)
            logger.info(f"Catalog loaded with {len(movies)} movies")
            return movies

    async def get_movie(self, movie_id: str) -> Optional[Movie]:
        """
        Movie details by identifier.

        Tries GET /movies/{id} first; if that fails (404 included) or returns
        nothing usable, scans the full catalog instead.
        """
        movie_id = str(movie_id)
        try:
            movie = normalize_movie(await self._api.get(f"/movies/{movie_id}"))
            if movie is not None:
                return movie
        except MovieHubError as e:
            logger.info(f"Direct lookup for movie {movie_id} failed ({e.message}), scanning catalog")

        for movie in await self.fetch_all():
            if movie.id == movie_id:
                return movie
        return None

    def refresh(self) -> None:
        """Drop the snapshot so the next read refetches."""
        self._cache.delete(CATALOG_CACHE_KEY)
