"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class SearchCandidate:
    """One catalog search hit (artist or release).

    Hey future me - Discogs search results carry dozens of fields, we only need the id
    and the display title. from_api() raises KeyError if either is missing; the resolver
    treats that as "this strategy found nothing".
    """

    id: int | str
    title: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SearchCandidate":
        """Build a candidate from a raw Discogs result dict."""
        return cls(id=data["id"], title=str(data["title"]))


@dataclass
class SavedAlbum:
    """An album from the user's streaming library."""

    spotify_id: str
    name: str
    artists: list[str] = field(default_factory=list)
    image_url: str = ""
    added_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate album data."""
        if not self.name or not self.name.strip():
            raise ValueError("Album name cannot be empty")

    @property
    def artists_display(self) -> str:
        """All artist names joined for display ("A, B")."""
        return ", ".join(self.artists)

    @property
    def primary_artist(self) -> str:
        """First credited artist (used for rating lookups)."""
        return self.artists[0] if self.artists else ""

    @classmethod
    def from_spotify(cls, item: dict[str, Any]) -> "SavedAlbum":
        """Build from one item of GET /me/albums.

        Args:
            item: Saved-album item ({"added_at": ..., "album": {...}})
        """
        album = item["album"]
        images = album.get("images") or []
        added_at = item.get("added_at")
        return cls(
            spotify_id=album.get("id", ""),
            name=album["name"],
            artists=[artist["name"] for artist in album.get("artists", [])],
            image_url=images[0]["url"] if images else "",
            added_at=datetime.fromisoformat(added_at) if added_at else None,
        )


@dataclass
class UserAlbum:
    """An album stored in a user's synced library."""

    user_id: str
    album_name: str
    artist_name: str
    primary_artist: str | None = None
    album_image: str = ""
    spotify_album_id: str | None = None
    added_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_synced: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def rating_artist(self) -> str:
        """Artist name to use for rating lookups.

        Rows written before primary_artist existed only have the joined display string,
        so fall back to its first name.
        """
        if self.primary_artist:
            return self.primary_artist
        return self.artist_name.split(", ")[0]

    @classmethod
    def from_saved(cls, user_id: str, album: SavedAlbum) -> "UserAlbum":
        """Create a library row from a freshly fetched streaming album.

        added_at comes from the streaming service (when the user saved the album), so
        newest-first ordering matches the user's library order.
        """
        return cls(
            user_id=user_id,
            album_name=album.name,
            artist_name=album.artists_display,
            primary_artist=album.primary_artist,
            album_image=album.image_url,
            spotify_album_id=album.spotify_id,
            added_at=album.added_at or datetime.now(UTC),
        )


@dataclass
class RatedAlbum:
    """Album view model: display fields plus an optional 0-10 rating."""

    name: str
    artists: str
    image: str
    rating: float | None = None


__all__ = [
    "RatedAlbum",
    "SavedAlbum",
    "SearchCandidate",
    "UserAlbum",
]
