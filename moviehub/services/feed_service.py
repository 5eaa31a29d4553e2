"""
Feed Service - joins the catalog, derived views and session state into what
a screen needs, issuing independent fetches concurrently
"""
from typing import List, Optional
import asyncio
import logging

from pydantic import BaseModel

from moviehub.config import LATEST_LIMIT, POPULAR_LIMIT, SIMILAR_LIMIT
from moviehub.schemas.movie import Movie
from moviehub.schemas.review import ReviewBundle
from moviehub.services.catalog_service import CatalogService
from moviehub.services.derivation import DerivationEngine
from moviehub.services.personalization_service import PersonalizationService
from moviehub.services.rating_service import RatingService
from moviehub.services.session_service import SessionGate

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


class HomeFeed(BaseModel):
    popular: List[Movie] = []
    latest: List[Movie] = []
    categories: List[str] = []


class MovieDetail(BaseModel):
    movie: Movie
    reviews: ReviewBundle
    similar: List[Movie] = []
    authenticated: bool = False
    is_favorite: bool = False
    is_watched: bool = False


class FeedService:
    def __init__(self, catalog: CatalogService, gate: SessionGate, ratings: RatingService):
        self._catalog = catalog
        self._gate = gate
        self._ratings = ratings

    async def _popular(self, n: int) -> List[Movie]:
        return DerivationEngine.popular(await self._catalog.fetch_all(), n)

    async def _latest(self, n: int) -> List[Movie]:
        return DerivationEngine.latest(await self._catalog.fetch_all(), n)

    async def _categories(self) -> List[str]:
        return [ALL_CATEGORIES] + DerivationEngine.categories(await self._catalog.fetch_all())

    async def home(self, popular_limit: int = POPULAR_LIMIT, latest_limit: int = LATEST_LIMIT) -> HomeFeed:
        """Popular, latest and categories loaded in parallel over one catalog fetch"""
        popular, latest, categories = await asyncio.gather(
            self._popular(popular_limit),
            self._latest(latest_limit),
            self._categories(),
        )
        return HomeFeed(popular=popular, latest=latest, categories=categories)

    async def browse_genre(self, tag: str) -> List[Movie]:
        """Movies in a genre; requires a session. "All" returns the whole catalog."""
        await self._gate.require("browse_genre")
        movies = await self._catalog.fetch_all()
        if (tag or "").strip() == ALL_CATEGORIES:
            return movies
        return DerivationEngine.by_genre(movies, tag)

    async def search(self, query: str) -> List[Movie]:
        """Free-text catalog search; requires a session."""
        await self._gate.require("search")
        return DerivationEngine.search(await self._catalog.fetch_all(), query)

    async def actor_movies(self, actor_name: str, current: Optional[Movie] = None) -> List[Movie]:
        return DerivationEngine.other_movies_by_actor(await self._catalog.fetch_all(), actor_name, current)

    async def director_movies(self, director_name: str) -> List[Movie]:
        return DerivationEngine.movies_by_director(await self._catalog.fetch_all(), director_name)

    async def _similar(self, movie: Movie, limit: int) -> List[Movie]:
        return DerivationEngine.similar(await self._catalog.fetch_all(), movie, limit)

    async def movie_detail(
        self,
        movie_id: str,
        personalization: Optional[PersonalizationService] = None,
        similar_limit: int = SIMILAR_LIMIT,
    ) -> Optional[MovieDetail]:
        """
        Everything the detail screen shows. Reviews, similar movies and the
        session lookup run concurrently; relation status is refreshed only
        for an authenticated user. Returns None for an unknown movie.
        """
        movie = await self._catalog.get_movie(movie_id)
        if movie is None:
            logger.info(f"Movie {movie_id} not found")
            return None

        reviews, similar, session = await asyncio.gather(
            self._ratings.load_reviews(movie.id),
            self._similar(movie, similar_limit),
            self._gate.current_session(),
        )
        if session is not None:
            own = next((review for review in reviews.reviews if review.user_id == session.id), None)
            reviews = reviews.model_copy(update={"user_review": own})

        is_favorite = is_watched = False
        if session is not None and personalization is not None:
            is_favorite, is_watched = await personalization.refresh_status(session.id, movie.id)

        return MovieDetail(
            movie=movie,
            reviews=reviews,
            similar=similar,
            authenticated=session is not None,
            is_favorite=is_favorite,
            is_watched=is_watched,
        )
