"""Domain value objects."""

from albumrater.domain.value_objects.rating import (
    Found,
    NotFound,
    RatingKey,
    RatingOutcome,
    RatingQuery,
    normalize_catalog_rating,
    outcome_from_stored,
    outcome_to_stored,
)
from albumrater.domain.value_objects.title_normalization import (
    ALBUM_CLEANUP_RULES,
    CleanupRule,
    generate_variants,
    light_clean,
    normalize,
)

__all__ = [
    "ALBUM_CLEANUP_RULES",
    "CleanupRule",
    "Found",
    "NotFound",
    "RatingKey",
    "RatingOutcome",
    "RatingQuery",
    "generate_variants",
    "light_clean",
    "normalize",
    "normalize_catalog_rating",
    "outcome_from_stored",
    "outcome_to_stored",
]
