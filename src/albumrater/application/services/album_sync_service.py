# Hey future me - this service feeds the user's Spotify library into the rating cache!
#
# Flows:
# - sync_albums_from_spotify():      full refresh, rates every album (SLOW, Discogs quota)
# - fetch_and_store_basic_albums():  full refresh without ratings (fast)
# - get_user_albums_from_database(): no network at all, ratings only from the cache
# - get_all_albums():                stored albums if we have any, else a basic fetch
#
# Albums are rated ONE AT A TIME. The Discogs limiter is shared process-wide, firing
# ratings in parallel would only queue up inside the limiter and make logs unreadable.
"""Album sync service - Spotify library to stored, rated albums."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from albumrater.domain.entities import RatedAlbum, SavedAlbum, UserAlbum
from albumrater.domain.value_objects import Found
from albumrater.infrastructure.observability.logging import set_correlation_id
from albumrater.infrastructure.persistence.repositories import UserAlbumRepository

if TYPE_CHECKING:
    from albumrater.application.services.rating_service import RatingService
    from albumrater.domain.ports import IRatingStore
    from albumrater.infrastructure.integrations.spotify_client import SpotifyClient
    from albumrater.infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)


class AlbumSyncService:
    """Sync a user's saved albums and attach cached ratings.

    Usage:
        service = AlbumSyncService(spotify_client, database, rating_service, store)
        albums = await service.sync_albums_from_spotify(access_token, user_id)
    """

    def __init__(
        self,
        spotify_client: SpotifyClient,
        database: Database,
        rating_service: RatingService,
        rating_store: IRatingStore,
    ) -> None:
        """Initialize album sync service.

        Args:
            spotify_client: Spotify client for library reads
            database: Database holding the user_albums table
            rating_service: Cached rating lookup (may hit Discogs)
            rating_store: Rating cache for read-only lookups (never hits Discogs)
        """
        self._spotify = spotify_client
        self._database = database
        self._rating_service = rating_service
        self._rating_store = rating_store

    async def fetch_saved_albums(self, access_token: str) -> list[SavedAlbum]:
        """Fetch the whole Spotify library, in library order (newest first).

        Raises:
            httpx.HTTPError: If Spotify rejects the request
        """
        items = await self._spotify.get_all_saved_albums(access_token)
        albums: list[SavedAlbum] = []
        for item in items:
            try:
                albums.append(SavedAlbum.from_spotify(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed saved album item: %s", e)
        return albums

    async def _replace_library(
        self, user_id: str, albums: list[SavedAlbum]
    ) -> list[UserAlbum]:
        user_albums = [UserAlbum.from_saved(user_id, album) for album in albums]
        async with self._database.session_scope() as session:
            repo = UserAlbumRepository(session)
            removed = await repo.clear_for_user(user_id)
            for user_album in user_albums:
                await repo.add(user_album)
        logger.info(
            "Stored %d albums for user %s (replaced %d)",
            len(user_albums),
            user_id,
            removed,
        )
        return user_albums

    async def sync_albums_from_spotify(
        self, access_token: str, user_id: str
    ) -> list[RatedAlbum]:
        """Replace the user's stored library and rate every album.

        Args:
            access_token: Spotify OAuth access token
            user_id: Spotify user id the library belongs to

        Returns:
            Albums in library order; rating is None where no rating exists or the
            lookup failed
        """
        set_correlation_id()
        albums = await self.fetch_saved_albums(access_token)
        await self._replace_library(user_id, albums)

        rated: list[RatedAlbum] = []
        for index, album in enumerate(albums, start=1):
            rating: float | None = None
            try:
                outcome = await self._rating_service.resolve_with_cache(
                    album.name, album.primary_artist
                )
                if isinstance(outcome, Found):
                    rating = outcome.rating
            except Exception as e:
                logger.error(
                    "Rating failed for %s by %s: %s",
                    album.name,
                    album.primary_artist,
                    e,
                    exc_info=True,
                )
            rated.append(
                RatedAlbum(
                    name=album.name,
                    artists=album.artists_display,
                    image=album.image_url,
                    rating=rating,
                )
            )
            logger.debug("Rated %d/%d albums", index, len(albums))

        logger.info(
            "Sync complete for user %s: %d albums, %d rated",
            user_id,
            len(rated),
            sum(1 for album in rated if album.rating is not None),
        )
        return rated

    async def get_user_albums_from_database(self, user_id: str) -> list[RatedAlbum]:
        """Stored albums with ratings from the cache only, newest first."""
        async with self._database.session_scope() as session:
            user_albums = await UserAlbumRepository(session).list_for_user(user_id)

        rated: list[RatedAlbum] = []
        for user_album in user_albums:
            outcome = await self._rating_store.get_rating(
                user_album.album_name, user_album.rating_artist
            )
            rated.append(
                RatedAlbum(
                    name=user_album.album_name,
                    artists=user_album.artist_name,
                    image=user_album.album_image,
                    rating=outcome.rating if isinstance(outcome, Found) else None,
                )
            )
        return rated

    async def fetch_and_store_basic_albums(
        self, access_token: str, user_id: str
    ) -> list[RatedAlbum]:
        """Replace the user's stored library without rating anything."""
        set_correlation_id()
        albums = await self.fetch_saved_albums(access_token)
        await self._replace_library(user_id, albums)
        return [
            RatedAlbum(
                name=album.name,
                artists=album.artists_display,
                image=album.image_url,
            )
            for album in albums
        ]

    async def get_all_albums(self, access_token: str, user_id: str) -> list[RatedAlbum]:
        """Stored albums if the user has any, otherwise a basic fetch from Spotify."""
        stored = await self.get_user_albums_from_database(user_id)
        if stored:
            logger.info("Returning %d stored albums for user %s", len(stored), user_id)
            return stored

        logger.info("No stored albums for user %s, fetching from Spotify", user_id)
        return await self.fetch_and_store_basic_albums(access_token, user_id)


__all__ = ["AlbumSyncService"]
