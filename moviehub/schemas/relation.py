from pydantic import BaseModel, Field


class RelationResult(BaseModel):
    """Outcome of a confirmed favorite/watched mutation"""
    movie_id: str
    active: bool = Field(..., description="Membership after the remote call")
    message: str = ""
    used_fallback: bool = False


class WatchedToggleResponse(BaseModel):
    """Payload of PUT /users/{id}/watched/{movieId}/toggle"""
    watched: bool
    message: str = ""
