"""Rating service - cached get-or-resolve for album ratings."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from albumrater.domain.value_objects import (
    Found,
    NotFound,
    RatingKey,
    RatingOutcome,
    RatingQuery,
)

if TYPE_CHECKING:
    from albumrater.application.services.rating_resolver import DiscogsRatingResolver
    from albumrater.domain.ports import IRatingStore

logger = logging.getLogger(__name__)


class RatingService:
    """The one entry point for album ratings.

    Hey future me - the store has THREE states per album and all three matter:
    - no row        -> never checked, ask Discogs and save whatever comes back
    - row, number   -> Found, no network
    - row, NULL     -> NotFound, no network (we already looked, don't spend quota again)

    Two tasks asking for the same uncached album would both hit Discogs, so resolution
    runs under a per-key lock and the store is re-read after acquiring it.
    """

    def __init__(self, resolver: DiscogsRatingResolver, store: IRatingStore) -> None:
        """Initialize rating service.

        Args:
            resolver: Discogs resolver (does the network work)
            store: Persistent rating cache
        """
        self._resolver = resolver
        self._store = store
        self._key_locks: dict[RatingKey, asyncio.Lock] = {}
        self._key_lock_users: dict[RatingKey, int] = {}

    async def resolve_with_cache(self, album_name: str, artist_name: str) -> RatingOutcome:
        """Get an album's rating from the cache, resolving it on first use.

        Args:
            album_name: Album title
            artist_name: Primary artist name

        Returns:
            Found or NotFound

        Raises:
            SQLAlchemyError: If the rating store fails (callers decide per album)
        """
        query = RatingQuery(album_name, artist_name)
        logger.debug('Checking for "%s" by "%s"', album_name, artist_name)

        cached = await self._cached(query)
        if cached is not None:
            return cached

        key = query.key
        lock = self._key_locks.setdefault(key, asyncio.Lock())
        self._key_lock_users[key] = self._key_lock_users.get(key, 0) + 1
        try:
            async with lock:
                # Another task may have resolved this key while we waited
                cached = await self._cached(query)
                if cached is not None:
                    return cached
                return await self._resolve_and_store(query)
        finally:
            self._key_lock_users[key] -= 1
            if not self._key_lock_users[key]:
                del self._key_lock_users[key]
                del self._key_locks[key]

    async def _cached(self, query: RatingQuery) -> RatingOutcome | None:
        outcome = await self._store.get_rating(query.album_name, query.artist_name)
        if isinstance(outcome, Found):
            logger.info("%s: Rating %s/10 (from database)", query, outcome.rating)
        elif isinstance(outcome, NotFound):
            logger.info("%s: Previously checked, no rating available", query)
        return outcome

    async def _resolve_and_store(self, query: RatingQuery) -> RatingOutcome:
        logger.info("%s: Not in database, fetching from API", query)

        outcome = await self._resolver.resolve(query)
        if isinstance(outcome, Found):
            logger.info(
                "%s: Got rating %s/10 from API, saving to database", query, outcome.rating
            )
        else:
            logger.info("%s: No rating found on Discogs, saving null to database", query)
        await self._store.save_rating(query.album_name, query.artist_name, outcome)
        return outcome


__all__ = ["RatingService"]
