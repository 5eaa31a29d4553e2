"""
Rating Service - reviews, rating summaries and the local aggregate fallback
"""

from typing import Any, List, Optional
import asyncio
import logging

from pydantic import ValidationError

from moviehub.errors import MovieHubError
from moviehub.schemas.movie import Movie
from moviehub.schemas.review import RatingSummary, Review, ReviewBundle, UserReviewEntry
from moviehub.services.api_client import MovieHubAPI

logger = logging.getLogger(__name__)


class RatingAggregator:
    """Same formula as the server's aggregate endpoint: plain arithmetic mean"""

    @staticmethod
    def summarize(reviews: List[Review], movie_id: Optional[str] = None) -> RatingSummary:
        count = len(reviews)
        if count == 0:
            return RatingSummary(movie_id=movie_id, mean=0.0, count=0)
        return RatingSummary(
            movie_id=movie_id,
            mean=sum(review.rating for review in reviews) / count,
            count=count,
        )


def parse_reviews(payload: Any) -> List[Review]:
    """
    Parse a review list, keeping one review per user (the newest one).
    Malformed entries are skipped.
    """
    if not isinstance(payload, list):
        return []

    by_user = {}
    for raw in payload:
        try:
            review = Review.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping malformed review: {e.error_count()} errors")
            continue
        existing = by_user.get(review.user_id)
        if existing is None or _is_newer(review, existing):
            by_user[review.user_id] = review
    return list(by_user.values())


def _is_newer(review: Review, other: Review) -> bool:
    if review.created_at is None or other.created_at is None:
        return True
    return review.created_at >= other.created_at


class RatingService:
    """Service for movie review and rating reads"""

    def __init__(self, api: MovieHubAPI):
        self._api = api

    async def get_movie_reviews(self, movie_id: str) -> List[Review]:
        """All reviews for a movie; [] when the service cannot be reached"""
        try:
            payload = await self._api.get(f"/movies/{movie_id}/reviews")
        except MovieHubError as e:
            logger.error(f"Error fetching reviews for movie {movie_id}: {e.message}")
            return []
        return parse_reviews(payload)

    async def get_movie_rating(self, movie_id: str, reviews: Optional[List[Review]] = None) -> RatingSummary:
        """
        Mean rating and review count from the service's aggregate endpoint.

        Falls back to summarizing the review set locally when the endpoint
        fails or answers with something unusable.
        """
        movie_id = str(movie_id)
        summary = await self._remote_rating(movie_id)
        if summary is not None:
            return summary

        if reviews is None:
            reviews = await self.get_movie_reviews(movie_id)
        return RatingAggregator.summarize(reviews, movie_id=movie_id)

    async def load_reviews(self, movie_id: str, user_id: Optional[str] = None) -> ReviewBundle:
        """
        Reload reviews and rating summary together (fetched concurrently).
        ``user_review`` is filled in when ``user_id`` is given.
        """
        movie_id = str(movie_id)
        reviews, summary = await asyncio.gather(
            self.get_movie_reviews(movie_id),
            self._remote_rating(movie_id),
        )
        if summary is None:
            summary = RatingAggregator.summarize(reviews, movie_id=movie_id)

        user_review = None
        if user_id is not None:
            user_review = next((review for review in reviews if review.user_id == str(user_id)), None)

        return ReviewBundle(movie_id=movie_id, reviews=reviews, summary=summary, user_review=user_review)

    async def _remote_rating(self, movie_id: str) -> Optional[RatingSummary]:
        try:
            payload = await self._api.get(f"/movies/{movie_id}/rating")
            if isinstance(payload, dict):
                return RatingSummary.model_validate(payload).model_copy(update={"movie_id": movie_id})
        except (MovieHubError, ValidationError) as e:
            logger.warning(f"Rating endpoint failed for movie {movie_id}, computing locally: {str(e)}")
        return None

    async def get_user_reviews(self, user_id: str, movies: List[Movie]) -> List[UserReviewEntry]:
        """
        Every review the user has written, found by scanning each movie's
        review set. Movies whose reviews cannot be loaded are skipped.
        """
        user_id = str(user_id)
        review_sets = await asyncio.gather(*(self.get_movie_reviews(movie.id) for movie in movies))

        entries = []
        for movie, reviews in zip(movies, review_sets):
            for review in reviews:
                if review.user_id == user_id:
                    entries.append(UserReviewEntry(review=review, movie=movie))
        return entries
