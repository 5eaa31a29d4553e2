"""
Derivation Engine - read-only views over the normalized catalog
Every function takes the collection as input and returns a new list
"""
from typing import List, Optional
import logging

from moviehub.config import LATEST_LIMIT, POPULAR_LIMIT, SIMILAR_LIMIT
from moviehub.schemas.movie import Movie
from moviehub.utils.text import contains_ignore_case

logger = logging.getLogger(__name__)


class DerivationEngine:
    """
    Popular, latest, genre, search and similar-movie views.
    Sorting relies on Python's stable sort, so ties keep catalog order.
    """

    @staticmethod
    def popular(movies: List[Movie], n: int = POPULAR_LIMIT) -> List[Movie]:
        """Highest IMDb rating first; movies without a rating are left out"""
        if n <= 0:
            return []
        rated = [movie for movie in movies if movie.rating is not None]
        return sorted(rated, key=lambda movie: movie.rating, reverse=True)[:n]

    @staticmethod
    def latest(movies: List[Movie], n: int = LATEST_LIMIT) -> List[Movie]:
        """Newest release year first; movies without a year are left out"""
        if n <= 0:
            return []
        dated = [movie for movie in movies if movie.release_year is not None]
        return sorted(dated, key=lambda movie: movie.release_year, reverse=True)[:n]

    @staticmethod
    def by_genre(movies: List[Movie], tag: str) -> List[Movie]:
        """
        Movies with a genre token containing ``tag`` (case-insensitive).
        "Sci" matches "Sci-Fi"; a blank tag matches nothing.
        """
        tag = (tag or "").strip()
        if not tag:
            return []
        return [
            movie for movie in movies
            if any(contains_ignore_case(token, tag) for token in movie.genre_tags)
        ]

    @staticmethod
    def categories(movies: List[Movie]) -> List[str]:
        """Every distinct genre token, in first-seen order"""
        seen = {}
        for movie in movies:
            for token in movie.genre_tags:
                seen.setdefault(token, None)
        return list(seen)

    @staticmethod
    def search(movies: List[Movie], query: str) -> List[Movie]:
        """
        Free-text search across title, director, genre and cast names.

        A movie matches if ANY field contains the query (case-insensitive).
        Empty or whitespace-only queries return no results.
        """
        query = (query or "").strip()
        if not query:
            return []

        results = []
        for movie in movies:
            if (
                contains_ignore_case(movie.title, query)
                or contains_ignore_case(movie.producer, query)
                or contains_ignore_case(movie.genre, query)
                or any(contains_ignore_case(name, query) for name in movie.cast_names)
            ):
                results.append(movie)
        logger.debug(f"Search '{query}' matched {len(results)} movies")
        return results

    @staticmethod
    def similar(movies: List[Movie], movie: Movie, limit: int = SIMILAR_LIMIT) -> List[Movie]:
        """
        Movies sharing at least one genre token with ``movie``.

        Tokens are compared exactly after trimming. Results keep catalog order
        (no ranking by overlap) and never include ``movie`` itself.
        """
        target_tags = set(movie.genre_tags)
        if not target_tags or limit <= 0:
            return []

        results = []
        for candidate in movies:
            if candidate.id == movie.id:
                continue
            if target_tags.intersection(candidate.genre_tags):
                results.append(candidate)
                if len(results) >= limit:
                    break
        return results

    @staticmethod
    def directors(movies: List[Movie]) -> List[str]:
        """Sorted distinct producer names"""
        return sorted({movie.producer.strip() for movie in movies if movie.producer.strip()})

    @staticmethod
    def movies_by_director(movies: List[Movie], name: str) -> List[Movie]:
        name = (name or "").strip()
        if not name:
            return []
        return [movie for movie in movies if contains_ignore_case(movie.producer, name)]

    @staticmethod
    def actors(movies: List[Movie]) -> List[str]:
        """Sorted distinct cast member names"""
        return sorted({name for movie in movies for name in movie.cast_names if name})

    @staticmethod
    def movies_by_actor(movies: List[Movie], name: str) -> List[Movie]:
        name = (name or "").strip()
        if not name:
            return []
        return [
            movie for movie in movies
            if any(contains_ignore_case(cast_name, name) for cast_name in movie.cast_names)
        ]

    @staticmethod
    def other_movies_by_actor(movies: List[Movie], actor_name: str, current: Optional[Movie]) -> List[Movie]:
        """An actor's movies, without the one currently on screen"""
        found = DerivationEngine.movies_by_actor(movies, actor_name)
        if current is None:
            return found
        return [movie for movie in found if movie.id != current.id]
