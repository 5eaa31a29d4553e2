"""
Import all models to ensure they are registered with SQLAlchemy
"""
from moviehub.models.stored_value import StoredValue

__all__ = [
    "StoredValue",
]
