"""Shared fixtures for albumrater tests."""

from collections.abc import AsyncIterator

import pytest

from albumrater.config import DatabaseSettings, DiscogsSettings, Settings, SpotifySettings
from albumrater.infrastructure.persistence import Database


@pytest.fixture
def discogs_settings() -> DiscogsSettings:
    """Discogs settings with a test token."""
    return DiscogsSettings(token="test-token", user_agent="AlbumRaterTests/1.0")


@pytest.fixture
def spotify_settings() -> SpotifySettings:
    """Spotify settings pointing at a fake API host."""
    return SpotifySettings(api_base_url="https://api.spotify.test/v1", max_retries=1)


@pytest.fixture
def settings(
    discogs_settings: DiscogsSettings, spotify_settings: SpotifySettings
) -> Settings:
    """Settings with an in-memory SQLite database."""
    return Settings(
        discogs=discogs_settings,
        spotify=spotify_settings,
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:", pool_pre_ping=False),
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    """In-memory database with all tables created."""
    db = Database(settings)
    await db.create_tables()
    yield db
    await db.close()
