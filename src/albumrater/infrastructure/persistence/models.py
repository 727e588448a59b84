"""SQLAlchemy ORM models for albumrater."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# SQLite drops tzinfo on the way back, attach UTC before comparing with aware datetimes.
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Hey future me, rating is NULLABLE ON PURPOSE! This table is a three-state cache:
# - no row             -> never checked, go ask Discogs
# - row, rating NULL   -> checked, Discogs has nothing - do NOT ask again
# - row, rating 7.4    -> checked, found
# album_name/artist_name are always stored lowercase, the unique constraint then
# makes "OK Computer" and "ok computer" the same entry.
class AlbumRatingModel(Base):
    """Cached Discogs rating for an album/artist pair."""

    __tablename__ = "album_ratings"
    __table_args__ = (
        UniqueConstraint("album_name", "artist_name", name="uq_album_ratings_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    album_name: Mapped[str] = mapped_column(String(512), nullable=False)
    artist_name: Mapped[str] = mapped_column(String(512), nullable=False)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )


class UserAlbumModel(Base):
    """An album in a user's synced streaming library.

    artist_name holds ALL artists joined with ", " (display string), primary_artist
    the first one. primary_artist is NULL for rows written by old versions.
    """

    __tablename__ = "user_albums"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "album_name", "artist_name", name="uq_user_albums_entry"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    album_name: Mapped[str] = mapped_column(String(512), nullable=False)
    artist_name: Mapped[str] = mapped_column(String(1024), nullable=False)
    primary_artist: Mapped[str | None] = mapped_column(String(512), nullable=True)
    album_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    spotify_album_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    last_synced: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
