"""Application lifecycle - wiring and teardown of long-lived components."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from albumrater.application.services import (
    AlbumSyncService,
    DiscogsRatingResolver,
    RatingService,
)
from albumrater.config import Settings, get_settings
from albumrater.domain.exceptions import ConfigurationError
from albumrater.infrastructure.integrations import DiscogsClient, SpotifyClient
from albumrater.infrastructure.observability import configure_logging
from albumrater.infrastructure.persistence import Database, DatabaseRatingStore
from albumrater.infrastructure.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


def _validate_sqlite_path(settings: Settings) -> None:
    """Validate SQLite database path accessibility before engine creation.

    Makes sure the parent directory exists and is writable (SQLite also needs to create
    journal files next to the database). The database file itself is left to SQLite.
    """
    db_path = settings._get_sqlite_db_path()
    if db_path is None:
        return

    try:
        if db_path.parent and str(db_path.parent) != ".":
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Ensured SQLite parent directory exists: %s", db_path.parent)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update DATABASE_URL or adjust directory permissions."
        ) from exc

    try:
        test_file = db_path.parent / f".{db_path.stem}_write_test"
        test_file.write_bytes(b"test")
        test_file.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to write files in database directory '{db_path.parent}': {exc}. "
            "SQLite requires write permissions to create database and journal files."
        ) from exc


@dataclass
class AppContext:
    """Everything a caller needs to rate albums, built once per process."""

    settings: Settings
    database: Database
    rating_limiter: SlidingWindowRateLimiter
    discogs_client: DiscogsClient
    spotify_client: SpotifyClient
    rating_store: DatabaseRatingStore
    rating_service: RatingService
    album_sync_service: AlbumSyncService


# Hey future me - there is exactly ONE Discogs limiter per process and it is created
# here. Building a second DiscogsClient with its own limiter would silently double the
# request rate and get us 429s.
@asynccontextmanager
async def application_context(
    settings: Settings | None = None,
    configure_logs: bool = True,
) -> AsyncIterator[AppContext]:
    """Build and tear down the application components.

    Args:
        settings: Settings to use (defaults to get_settings())
        configure_logs: Install the root log handler (disable in tests)

    Yields:
        Wired AppContext

    Raises:
        ConfigurationError: If the SQLite directory is not usable
    """
    settings = settings or get_settings()

    if configure_logs:
        configure_logging(
            log_level=settings.log_level,
            json_format=settings.observability.log_json_format,
            app_name=settings.app_name,
        )

    _validate_sqlite_path(settings)
    database = Database(settings)
    await database.create_tables()
    logger.info("Database initialized: %s", settings.database.url)

    discogs = settings.discogs
    if not discogs.is_configured:
        logger.warning("DISCOGS_TOKEN not set - albums will not be rated")

    rating_limiter = SlidingWindowRateLimiter(
        max_requests=discogs.max_requests,
        window_seconds=discogs.window_seconds,
        safety_margin_seconds=discogs.safety_margin_seconds,
    )
    discogs_client = DiscogsClient(discogs, rating_limiter)
    spotify_client = SpotifyClient(settings.spotify)
    rating_store = DatabaseRatingStore(database)
    rating_service = RatingService(
        DiscogsRatingResolver(discogs_client, discogs), rating_store
    )
    album_sync_service = AlbumSyncService(
        spotify_client, database, rating_service, rating_store
    )

    try:
        yield AppContext(
            settings=settings,
            database=database,
            rating_limiter=rating_limiter,
            discogs_client=discogs_client,
            spotify_client=spotify_client,
            rating_store=rating_store,
            rating_service=rating_service,
            album_sync_service=album_sync_service,
        )
    finally:
        await discogs_client.close()
        await spotify_client.close()
        await database.close()
        logger.info("Application components closed")


__all__ = ["AppContext", "application_context"]
