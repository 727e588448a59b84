"""Persistence layer - database, ORM models and repositories."""

from albumrater.infrastructure.persistence.database import Database
from albumrater.infrastructure.persistence.models import (
    AlbumRatingModel,
    Base,
    UserAlbumModel,
)
from albumrater.infrastructure.persistence.rating_store import DatabaseRatingStore
from albumrater.infrastructure.persistence.repositories import (
    AlbumRatingRepository,
    UserAlbumRepository,
)

__all__ = [
    "AlbumRatingModel",
    "AlbumRatingRepository",
    "Base",
    "Database",
    "DatabaseRatingStore",
    "UserAlbumModel",
    "UserAlbumRepository",
]
