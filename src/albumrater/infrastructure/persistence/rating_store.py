"""Database-backed rating store with one short transaction per operation."""

import logging

from albumrater.domain.ports import IRatingStore
from albumrater.domain.value_objects import RatingOutcome

from .database import Database
from .repositories import AlbumRatingRepository

logger = logging.getLogger(__name__)


class DatabaseRatingStore(IRatingStore):
    """IRatingStore that commits each write immediately.

    Hey future me - the cache gate runs for minutes during a big library sync. If the
    writes piggybacked on one long session, a crash halfway would throw away every rating
    we already paid Discogs requests for. So each call gets its own session_scope().
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    async def get_rating(
        self, album_name: str, artist_name: str
    ) -> RatingOutcome | None:
        async with self.database.session_scope() as session:
            outcome = await AlbumRatingRepository(session).get_rating(
                album_name, artist_name
            )
        logger.debug(
            "DB get_rating: %r by %r -> %s",
            album_name.lower(),
            artist_name.lower(),
            "absent" if outcome is None else outcome,
        )
        return outcome

    async def save_rating(
        self, album_name: str, artist_name: str, outcome: RatingOutcome
    ) -> None:
        logger.debug(
            "DB save_rating: %s for %r by %r",
            outcome,
            album_name.lower(),
            artist_name.lower(),
        )
        async with self.database.session_scope() as session:
            await AlbumRatingRepository(session).save_rating(
                album_name, artist_name, outcome
            )
