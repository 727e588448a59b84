"""Application services."""

from albumrater.application.services.album_sync_service import AlbumSyncService
from albumrater.application.services.rating_resolver import (
    DiscogsRatingResolver,
    ResolutionStage,
)
from albumrater.application.services.rating_service import RatingService
from albumrater.application.services.title_matcher import (
    MatchKind,
    classify_title_match,
    find_best_artist_match,
)

__all__ = [
    "AlbumSyncService",
    "DiscogsRatingResolver",
    "MatchKind",
    "RatingService",
    "ResolutionStage",
    "classify_title_match",
    "find_best_artist_match",
]
