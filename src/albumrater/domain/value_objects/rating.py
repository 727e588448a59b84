"""Rating value objects: queries, outcomes and rating normalization.

Hey future me - RatingOutcome is a SUM TYPE, not a nullable float!
Found(rating) means the catalog had a community rating, NotFound means we looked and
there was nothing. "Never looked" is NOT an outcome - the store signals that with None.
Keep those three states apart or the cache will start re-querying Discogs for albums
we already know have no rating.
"""

import math
from dataclasses import dataclass

from albumrater.domain.exceptions import ValidationException

# Discogs community ratings are on a 0-5 scale, we present 0-10.
CATALOG_RATING_SCALE = 5.0
NORMALIZED_RATING_SCALE = 10.0


@dataclass(frozen=True, slots=True)
class RatingKey:
    """Case-insensitive identity of an album/artist pair in the rating store."""

    album: str
    artist: str

    @classmethod
    def of(cls, album_name: str, artist_name: str) -> "RatingKey":
        """Build a key from display strings (lowercased)."""
        return cls(album=album_name.lower(), artist=artist_name.lower())


@dataclass(frozen=True, slots=True)
class RatingQuery:
    """Input to rating resolution: an album title and its (primary) artist."""

    album_name: str
    artist_name: str

    @property
    def key(self) -> RatingKey:
        """Store key for this query."""
        return RatingKey.of(self.album_name, self.artist_name)

    def __str__(self) -> str:
        return f"{self.album_name} by {self.artist_name}"


@dataclass(frozen=True, slots=True)
class Found:
    """A community rating on the 0-10 scale, one decimal."""

    rating: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.rating <= NORMALIZED_RATING_SCALE:
            raise ValidationException(
                f"Rating {self.rating} outside 0-{NORMALIZED_RATING_SCALE:g}"
            )


@dataclass(frozen=True, slots=True)
class NotFound:
    """Resolution ran and no rating exists (or could not be determined)."""


RatingOutcome = Found | NotFound


def normalize_catalog_rating(average: float) -> float:
    """Convert a 0-5 catalog average to the 0-10 scale, rounded to one decimal.

    Rounds half up, clamped to the 0-10 range.

    Examples:
        >>> normalize_catalog_rating(4.3)
        8.6
        >>> normalize_catalog_rating(5.0)
        10.0
    """
    scaled = (average / CATALOG_RATING_SCALE) * NORMALIZED_RATING_SCALE
    rounded = math.floor(scaled * 10 + 0.5) / 10
    return min(NORMALIZED_RATING_SCALE, max(0.0, rounded))


def outcome_from_stored(value: float | None) -> RatingOutcome:
    """Map a stored nullable rating column to an outcome (row must exist)."""
    if value is None:
        return NotFound()
    return Found(rating=float(value))


def outcome_to_stored(outcome: RatingOutcome) -> float | None:
    """Map an outcome to the nullable rating column."""
    if isinstance(outcome, Found):
        return outcome.rating
    return None


__all__ = [
    "CATALOG_RATING_SCALE",
    "Found",
    "NORMALIZED_RATING_SCALE",
    "NotFound",
    "RatingKey",
    "RatingOutcome",
    "RatingQuery",
    "normalize_catalog_rating",
    "outcome_from_stored",
    "outcome_to_stored",
]
