"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscogsSettings(BaseSettings):
    """Discogs catalog API configuration.

    Hey future me - Discogs allows 60 authenticated requests per minute. The limiter
    window and the retry policy below are tuned to that quota, don't raise them
    without checking the X-Discogs-Ratelimit headers first.
    """

    model_config = SettingsConfigDict(
        env_prefix="DISCOGS_", env_file=".env", extra="ignore"
    )

    token: str | None = Field(default=None, description="Personal access token")
    base_url: str = "https://api.discogs.com"
    user_agent: str = "AlbumRater/1.0 +http://localhost:8888"
    timeout: float = 30.0

    max_requests: int = Field(default=60, ge=1)
    window_seconds: float = Field(default=60.0, gt=0)
    safety_margin_seconds: float = Field(default=0.1, ge=0)
    max_attempts: int = Field(default=5, ge=1)

    direct_search_per_page: int = 5
    direct_search_detail_limit: int = 3
    artist_search_per_page: int = 10
    artist_releases_per_page: int = 50

    @property
    def is_configured(self) -> bool:
        """Check if a usable token is present."""
        return bool(self.token and self.token.strip())


class SpotifySettings(BaseSettings):
    """Spotify Web API configuration (library reads only)."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_", env_file=".env", extra="ignore"
    )

    api_base_url: str = "https://api.spotify.com/v1"
    page_size: int = Field(default=50, ge=1, le=50)
    timeout: float = 30.0
    max_retries: int = 3


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=".env", extra="ignore"
    )

    url: str = "sqlite+aiosqlite:///./ratings.db"
    echo: bool = False
    pool_pre_ping: bool = True


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_", env_file=".env", extra="ignore"
    )

    log_json_format: bool = False


class Settings(BaseSettings):
    """Root settings object.

    Sections are accessed as settings.<section>.<key>, e.g. settings.discogs.token.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "albumrater"
    log_level: str = "INFO"

    discogs: DiscogsSettings = Field(default_factory=DiscogsSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    observability: ObservabilitySettings = Field(
        default_factory=ObservabilitySettings
    )

    def _get_sqlite_db_path(self) -> Path | None:
        """Return the SQLite database file path, or None for other backends."""
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, path = url.partition(":///")
        if not path or path == ":memory:":
            return None
        return Path(path)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
