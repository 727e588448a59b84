"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Any

from albumrater.domain.entities import UserAlbum
from albumrater.domain.value_objects import RatingOutcome


# Hey future me, IRatingStore is THE three-state contract!
# get_rating() returns None ONLY for "never checked". A row with a NULL rating comes back
# as NotFound(). If an implementation ever returns None for a NULL row, the cache gate
# will re-query Discogs forever for every album without a rating.
class IRatingStore(ABC):
    """Persistent key-value store for resolved ratings (keys are case-insensitive)."""

    @abstractmethod
    async def get_rating(self, album_name: str, artist_name: str) -> RatingOutcome | None:
        """Get a stored outcome, or None if the pair was never checked."""
        pass

    @abstractmethod
    async def save_rating(
        self, album_name: str, artist_name: str, outcome: RatingOutcome
    ) -> None:
        """Insert or replace the outcome for the pair."""
        pass


class IDiscogsClient(ABC):
    """Discogs catalog API (read-only endpoints used by rating resolution)."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Check if an API token is available."""
        pass

    @abstractmethod
    async def search_releases(
        self, query: str, per_page: int, context: str = ""
    ) -> dict[str, Any] | None:
        """Search album releases. None means the request gave no data."""
        pass

    @abstractmethod
    async def search_artists(
        self, name: str, per_page: int, context: str = ""
    ) -> dict[str, Any] | None:
        """Search artists by name."""
        pass

    @abstractmethod
    async def get_release(
        self, release_id: int | str, context: str = ""
    ) -> dict[str, Any] | None:
        """Get full release detail (including community rating)."""
        pass

    @abstractmethod
    async def get_artist_releases(
        self, artist_id: int | str, per_page: int, context: str = ""
    ) -> dict[str, Any] | None:
        """Get an artist's releases, newest first."""
        pass


class ISpotifyClient(ABC):
    """Spotify Web API (library reads)."""

    @abstractmethod
    async def get_saved_albums(
        self, access_token: str, limit: int = 50, offset: int = 0
    ) -> dict[str, Any]:
        """Get one page of the user's saved albums."""
        pass


class IUserAlbumRepository(ABC):
    """Repository interface for a user's synced albums."""

    @abstractmethod
    async def add(self, album: UserAlbum) -> None:
        """Insert or replace a user album."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[UserAlbum]:
        """List a user's albums, most recently added first."""
        pass

    @abstractmethod
    async def clear_for_user(self, user_id: str) -> int:
        """Delete all albums of a user, returning the number removed."""
        pass


__all__ = [
    "IDiscogsClient",
    "IRatingStore",
    "ISpotifyClient",
    "IUserAlbumRepository",
]
