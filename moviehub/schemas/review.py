"""
Review Schemas - Pydantic models for review request/response validation
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import List, Optional

from moviehub.schemas.movie import Movie
from moviehub.utils.text import strip_markup, validate_no_script

MAX_COMMENT_LENGTH = 1000


class Review(BaseModel):
    """A user's rating and comment for one movie, as returned by the service"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    movie_id: Optional[str] = Field(None, alias="movieId")
    user_id: str = Field(..., alias="userId")
    user_display_name: Optional[str] = Field(None, alias="userDisplayName")
    rating: int = Field(..., ge=1, le=10)
    comment: Optional[str] = Field(None, max_length=MAX_COMMENT_LENGTH)
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @field_validator('id', 'movie_id', 'user_id', mode='before')
    @classmethod
    def coerce_ids(cls, v):
        return None if v is None else str(v)

    @field_validator('created_at')
    @classmethod
    def assume_utc(cls, v):
        # Timestamps without an offset are UTC so any two stay comparable
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ReviewCreate(BaseModel):
    """Schema for creating/updating the current user's review"""
    rating: int = Field(..., description="Rating value (1-10)", ge=1, le=10)
    comment: str

    @field_validator('comment', mode='before')
    @classmethod
    def clean_comment(cls, v):
        # Checks run on the plain text that is actually sent
        v = "" if v is None else str(v).strip()
        if not v:
            raise ValueError('Please write your review')
        v = validate_no_script(strip_markup(validate_no_script(v))).strip()
        if not v:
            raise ValueError('Please write your review')
        if len(v) > MAX_COMMENT_LENGTH:
            raise ValueError(f'Review cannot be longer than {MAX_COMMENT_LENGTH} characters')
        return v


class RatingSummary(BaseModel):
    """Mean rating and review count for a movie"""
    model_config = ConfigDict(populate_by_name=True)

    movie_id: Optional[str] = Field(None, alias="movieId")
    mean: float = Field(0.0, alias="average")
    count: int = Field(0, ge=0)

    @field_validator('movie_id', mode='before')
    @classmethod
    def coerce_movie_id(cls, v):
        return None if v is None else str(v)


class ReviewBundle(BaseModel):
    """Everything the detail view shows about reviews, reloaded as one unit"""
    movie_id: str
    reviews: List[Review] = []
    summary: RatingSummary
    user_review: Optional[Review] = None


class UserReviewEntry(BaseModel):
    """A review written by the user together with the movie it belongs to"""
    review: Review
    movie: Movie
