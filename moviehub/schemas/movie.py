"""
Movie Schemas - strict catalog records built at the catalog boundary
Wire payloads use camelCase names (movieName, imdbRating, ...); aliases map them
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional, Tuple
import json
import logging
import math
import re

from moviehub.config import PLACEHOLDER_POSTER
from moviehub.utils.text import split_genres

logger = logging.getLogger(__name__)

_YEAR_PATTERN = re.compile(r"\d{4}")


def normalize_gallery(value: Any) -> List[str]:
    """
    Coerce a gallery field into an ordered list of image URIs.

    The backend stores galleries as JSON text, so the field may arrive as an
    encoded string. Anything that does not decode to a list becomes [].
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.debug("Discarding gallery that is not valid JSON")
            return []
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


class CastMember(BaseModel):
    """One credited actor"""
    id: Optional[str] = None
    name: str

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        return None if v is None else str(v)


class Movie(BaseModel):
    """Fully-typed catalog entry; downstream code never re-checks field shape"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str = Field("", alias="movieName")
    release_year: Optional[int] = Field(None, alias="releaseYear")
    genre: str = ""
    rating: Optional[float] = Field(None, alias="imdbRating", description="IMDb-style rating (0-10)")
    producer: str = Field("", description="Producer, surfaced as director")
    poster_url: str = Field(PLACEHOLDER_POSTER, alias="posterUrl")
    backdrop_url: str = Field(PLACEHOLDER_POSTER, alias="backdropUrl")
    description: str = ""
    cast: List[CastMember] = Field(default_factory=list)
    gallery: List[str] = Field(default_factory=list)
    trailer_url: Optional[str] = Field(None, alias="trailerUrl")

    @field_validator('id', mode='before')
    @classmethod
    def require_id(cls, v):
        if v is None or str(v).strip() == "":
            raise ValueError('Movie identifier is required')
        return str(v).strip()

    @field_validator('title', 'genre', 'producer', 'description', mode='before')
    @classmethod
    def default_text(cls, v):
        return "" if v is None else str(v)

    @field_validator('release_year', mode='before')
    @classmethod
    def parse_year(cls, v):
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        match = _YEAR_PATTERN.search(str(v))
        return int(match.group()) if match else None

    @field_validator('rating', mode='before')
    @classmethod
    def parse_rating(cls, v):
        if v is None or isinstance(v, bool) or v == "":
            return None
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        if math.isnan(value) or value < 0 or value > 10:
            return None
        return value

    @field_validator('poster_url', 'backdrop_url', mode='before')
    @classmethod
    def default_image(cls, v):
        return v if isinstance(v, str) and v.strip() else PLACEHOLDER_POSTER

    @field_validator('cast', mode='before')
    @classmethod
    def clean_cast(cls, v):
        if not isinstance(v, list):
            return []
        return [
            member for member in v
            if isinstance(member, CastMember)
            or (isinstance(member, dict) and isinstance(member.get('name'), str) and member['name'].strip())
        ]

    @field_validator('gallery', mode='before')
    @classmethod
    def clean_gallery(cls, v):
        return normalize_gallery(v)

    @field_validator('trailer_url', mode='before')
    @classmethod
    def empty_trailer(cls, v):
        return v if isinstance(v, str) and v.strip() else None

    @property
    def genre_tags(self) -> Tuple[str, ...]:
        """Genre string split into trimmed tokens"""
        return split_genres(self.genre)

    @property
    def cast_names(self) -> List[str]:
        return [member.name.strip() for member in self.cast]
