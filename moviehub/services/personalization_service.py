"""
Personalization Service - favorite, watched and review mutations

Local relation state changes only after the remote service confirms a
mutation; a failed call leaves it exactly as it was.
"""
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Set, Tuple, Union
import asyncio
import inspect
import logging

from pydantic import ValidationError

from moviehub.errors import MovieHubError, MutationInProgress
from moviehub.schemas.movie import Movie
from moviehub.schemas.relation import RelationResult, WatchedToggleResponse
from moviehub.schemas.review import ReviewBundle, ReviewCreate
from moviehub.schemas.validation import validate_input
from moviehub.services.api_client import MovieHubAPI
from moviehub.services.catalog_service import normalize_movies
from moviehub.services.rating_service import RatingService
from moviehub.services.session_service import SessionGate

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[], Union[bool, Awaitable[bool]]]


class RecoveryStep(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    FAILED = "failed"


class FallbackPolicy:
    """
    Attempt(primary) -> on failure Attempt(fallback) -> on failure report the
    ORIGINAL error. The fallback's own error is logged, never raised.

    ``steps`` records which attempts ran and how they ended.
    """

    def __init__(self, name: str, primary: Callable[[], Awaitable[Any]], fallback: Callable[[], Awaitable[Any]]):
        self.name = name
        self._primary = primary
        self._fallback = fallback
        self.steps: List[Tuple[RecoveryStep, bool]] = []

    @property
    def used_fallback(self) -> bool:
        return any(step == RecoveryStep.FALLBACK for step, _ in self.steps)

    async def run(self) -> Any:
        try:
            result = await self._primary()
            self.steps.append((RecoveryStep.PRIMARY, True))
            return result
        except MovieHubError as primary_error:
            self.steps.append((RecoveryStep.PRIMARY, False))
            logger.warning(f"{self.name}: primary attempt failed ({primary_error.message}), trying fallback")
            original = primary_error

        try:
            result = await self._fallback()
            self.steps.append((RecoveryStep.FALLBACK, True))
            return result
        except MovieHubError as fallback_error:
            self.steps.append((RecoveryStep.FALLBACK, False))
            self.steps.append((RecoveryStep.FAILED, False))
            logger.error(f"{self.name}: fallback failed too ({fallback_error.message}), reporting original error")
        raise original


class RelationState:
    """Last remotely-confirmed favorite/watched membership per user"""

    def __init__(self):
        self._favorites: Set[Tuple[str, str]] = set()
        self._watched: Set[Tuple[str, str]] = set()

    def _relation(self, relation: str) -> Set[Tuple[str, str]]:
        return self._favorites if relation == "favorites" else self._watched

    def is_member(self, relation: str, user_id: str, movie_id: str) -> bool:
        return (str(user_id), str(movie_id)) in self._relation(relation)

    def set_member(self, relation: str, user_id: str, movie_id: str, active: bool) -> None:
        key = (str(user_id), str(movie_id))
        if active:
            self._relation(relation).add(key)
        else:
            self._relation(relation).discard(key)


class PersonalizationService:
    """Session-gated mutations of per-user relations and reviews"""

    def __init__(self, api: MovieHubAPI, gate: SessionGate, ratings: RatingService):
        self._api = api
        self._gate = gate
        self._ratings = ratings
        self.state = RelationState()
        self._in_flight: Set[Tuple[str, str, str]] = set()

    @asynccontextmanager
    async def _guard(self, user_id: str, relation: str, movie_id: str):
        """Reject a second mutation on the same relation while one is outstanding."""
        key = (str(user_id), relation, str(movie_id))
        if key in self._in_flight:
            logger.info(f"Dropping concurrent mutation for {key}")
            raise MutationInProgress(key)
        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)

    def is_favorite(self, user_id: str, movie_id: str) -> bool:
        return self.state.is_member("favorites", user_id, movie_id)

    def is_watched(self, user_id: str, movie_id: str) -> bool:
        return self.state.is_member("watched", user_id, movie_id)

    # ---------- FAVORITES ----------

    async def toggle_favorite(self, user_id: str, movie_id: str, currently_favorite: bool) -> RelationResult:
        """
        Add or remove a favorite.

        Removal falls back to the add endpoint, which some service versions
        implement as a toggle. If both fail, the remove error is raised.
        """
        await self._gate.require("toggle_favorite")
        endpoint = f"/users/{user_id}/favorites/{movie_id}"

        async with self._guard(user_id, "favorites", movie_id):
            if currently_favorite:
                policy = FallbackPolicy(
                    "remove_favorite",
                    primary=lambda: self._api.delete(endpoint),
                    fallback=lambda: self._api.post(endpoint),
                )
                await policy.run()
                active, used_fallback = False, policy.used_fallback
                message = "Removed from favorites"
            else:
                await self._api.post(endpoint)
                active, used_fallback = True, False
                message = "Added to favorites"

        self.state.set_member("favorites", user_id, movie_id, active)
        logger.info(f"Favorite for user {user_id}, movie {movie_id} is now {active}")
        return RelationResult(movie_id=str(movie_id), active=active, message=message, used_fallback=used_fallback)

    async def get_favorites(self, user_id: str) -> List[Movie]:
        """The user's favorite movies; [] on failure"""
        await self._gate.require("view_favorites")
        try:
            movies = normalize_movies(await self._api.get(f"/users/{user_id}/favorites"))
        except MovieHubError as e:
            logger.error(f"Error fetching favorites for user {user_id}: {e.message}")
            return []
        for movie in movies:
            self.state.set_member("favorites", user_id, movie.id, True)
        return movies

    # ---------- WATCHED ----------

    async def toggle_watched(self, user_id: str, movie_id: str) -> RelationResult:
        """Flip the watched flag; the new value always comes from the server."""
        await self._gate.require("toggle_watched")

        async with self._guard(user_id, "watched", movie_id):
            payload = await self._api.put(f"/users/{user_id}/watched/{movie_id}/toggle")

        try:
            confirmed = WatchedToggleResponse.model_validate(payload)
        except ValidationError as e:
            raise MovieHubError(f"Unexpected watched toggle response: {e.error_count()} errors") from e

        self.state.set_member("watched", user_id, movie_id, confirmed.watched)
        return RelationResult(movie_id=str(movie_id), active=confirmed.watched, message=confirmed.message)

    async def get_watched(self, user_id: str) -> List[Movie]:
        """The user's watched movies; [] on failure"""
        await self._gate.require("view_watched")
        try:
            movies = normalize_movies(await self._api.get(f"/users/{user_id}/watched"))
        except MovieHubError as e:
            logger.error(f"Error fetching watched list for user {user_id}: {e.message}")
            return []
        for movie in movies:
            self.state.set_member("watched", user_id, movie.id, True)
        return movies

    async def is_movie_watched(self, user_id: str, movie_id: str) -> bool:
        """Remote watched flag for one movie; False on failure"""
        try:
            payload = await self._api.get(f"/users/{user_id}/watched/{movie_id}")
        except MovieHubError as e:
            logger.error(f"Error checking watched flag for movie {movie_id}: {e.message}")
            return False
        watched = bool(payload.get("watched")) if isinstance(payload, dict) else False
        self.state.set_member("watched", user_id, movie_id, watched)
        return watched

    # ---------- STATUS & LISTS ----------

    async def refresh_status(self, user_id: str, movie_id: str) -> Tuple[bool, bool]:
        """Seed local state for one movie: (is_favorite, is_watched), fetched concurrently."""
        favorites, watched = await asyncio.gather(
            self.get_favorites(user_id),
            self.is_movie_watched(user_id, movie_id),
        )
        favorite = any(movie.id == str(movie_id) for movie in favorites)
        self.state.set_member("favorites", user_id, movie_id, favorite)
        return favorite, watched

    async def load_lists(self, user_id: str) -> Tuple[List[Movie], List[Movie]]:
        """Favorites and watched lists, fetched concurrently"""
        return tuple(await asyncio.gather(self.get_favorites(user_id), self.get_watched(user_id)))

    # ---------- REVIEWS ----------

    async def upsert_review(self, movie_id: str, user_id: str, rating: int, comment: str) -> ReviewBundle:
        """
        Create or replace the user's review, then reload the movie's reviews
        and rating summary so aggregates match the server.

        Raises:
            ValidationFailed: Empty comment, comment over 1000 chars, rating outside 1-10
        """
        review = validate_input(ReviewCreate, rating=rating, comment=comment)
        await self._gate.require("upsert_review")

        async with self._guard(user_id, "review", movie_id):
            await self._api.post(f"/movies/{movie_id}/reviews/{user_id}", json=review.model_dump())
        logger.info(f"Review saved for movie {movie_id} by user {user_id}")

        return await self._ratings.load_reviews(movie_id, user_id=user_id)

    async def delete_review(self, movie_id: str, user_id: str, confirm: ConfirmCallback) -> Optional[ReviewBundle]:
        """
        Delete the user's review after ``confirm()`` agrees.

        Returns None (and makes no remote call) when the user cancels.
        """
        await self._gate.require("delete_review")

        decision = confirm()
        if inspect.isawaitable(decision):
            decision = await decision
        if not decision:
            logger.debug(f"Review deletion for movie {movie_id} cancelled")
            return None

        async with self._guard(user_id, "review", movie_id):
            await self._api.delete(f"/movies/{movie_id}/reviews/{user_id}")
        logger.info(f"Review deleted for movie {movie_id} by user {user_id}")

        return await self._ratings.load_reviews(movie_id, user_id=user_id)
