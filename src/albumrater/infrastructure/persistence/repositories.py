"""Repository implementations for ratings and user albums."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from albumrater.domain.entities import UserAlbum
from albumrater.domain.ports import IRatingStore, IUserAlbumRepository
from albumrater.domain.value_objects import (
    RatingKey,
    RatingOutcome,
    outcome_from_stored,
    outcome_to_stored,
)

from .models import AlbumRatingModel, UserAlbumModel, ensure_utc_aware


class AlbumRatingRepository(IRatingStore):
    """SQLAlchemy access to the album_ratings cache table.

    Every method lowercases its inputs via RatingKey, callers may pass display strings.
    """

    # Hey future me, the session is NOT committed here - that happens in session_scope()!
    # Repos only stage changes.
    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def _get_model(self, key: RatingKey) -> AlbumRatingModel | None:
        stmt = select(AlbumRatingModel).where(
            AlbumRatingModel.album_name == key.album,
            AlbumRatingModel.artist_name == key.artist,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_rating(
        self, album_name: str, artist_name: str
    ) -> RatingOutcome | None:
        """Get the stored outcome, None if the pair has no row."""
        model = await self._get_model(RatingKey.of(album_name, artist_name))
        if model is None:
            return None
        return outcome_from_stored(model.rating)

    async def save_rating(
        self, album_name: str, artist_name: str, outcome: RatingOutcome
    ) -> None:
        """Insert or replace the outcome for the pair."""
        key = RatingKey.of(album_name, artist_name)
        model = await self._get_model(key)
        value = outcome_to_stored(outcome)

        if model is None:
            self.session.add(
                AlbumRatingModel(
                    album_name=key.album, artist_name=key.artist, rating=value
                )
            )
        else:
            model.rating = value
            model.updated_at = datetime.now(UTC)
        await self.session.flush()

    async def clear_rating(self, album_name: str, artist_name: str) -> bool:
        """Forget one pair so the next lookup queries Discogs again."""
        key = RatingKey.of(album_name, artist_name)
        stmt = delete(AlbumRatingModel).where(
            AlbumRatingModel.album_name == key.album,
            AlbumRatingModel.artist_name == key.artist,
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def clear_all(self) -> int:
        """Delete every cached rating, returning the number of rows removed."""
        result = await self.session.execute(delete(AlbumRatingModel))
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def list_all(self) -> list[tuple[RatingKey, RatingOutcome]]:
        """List every cached entry ordered by album name."""
        stmt = select(AlbumRatingModel).order_by(
            AlbumRatingModel.album_name, AlbumRatingModel.artist_name
        )
        result = await self.session.execute(stmt)
        return [
            (RatingKey(model.album_name, model.artist_name), outcome_from_stored(model.rating))
            for model in result.scalars().all()
        ]

    async def find_similar(
        self, album_name: str, artist_name: str
    ) -> list[tuple[RatingKey, RatingOutcome]]:
        """Entries whose album OR artist contains the given (lowercased) text."""
        key = RatingKey.of(album_name, artist_name)
        stmt = (
            select(AlbumRatingModel)
            .where(
                or_(
                    AlbumRatingModel.album_name.like(f"%{key.album}%"),
                    AlbumRatingModel.artist_name.like(f"%{key.artist}%"),
                )
            )
            .order_by(AlbumRatingModel.album_name)
        )
        result = await self.session.execute(stmt)
        return [
            (RatingKey(model.album_name, model.artist_name), outcome_from_stored(model.rating))
            for model in result.scalars().all()
        ]


class UserAlbumRepository(IUserAlbumRepository):
    """SQLAlchemy implementation of the user album repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, album: UserAlbum) -> None:
        """Insert or replace a user album (unique on user/album/artists)."""
        stmt = select(UserAlbumModel).where(
            UserAlbumModel.user_id == album.user_id,
            UserAlbumModel.album_name == album.album_name,
            UserAlbumModel.artist_name == album.artist_name,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = UserAlbumModel(
                user_id=album.user_id,
                album_name=album.album_name,
                artist_name=album.artist_name,
                added_at=album.added_at,
            )
            self.session.add(model)

        model.primary_artist = album.primary_artist
        model.album_image = album.album_image
        model.spotify_album_id = album.spotify_album_id
        model.last_synced = datetime.now(UTC)
        await self.session.flush()

    async def list_for_user(self, user_id: str) -> list[UserAlbum]:
        """List a user's albums, most recently added first."""
        stmt = (
            select(UserAlbumModel)
            .where(UserAlbumModel.user_id == user_id)
            .order_by(UserAlbumModel.added_at.desc(), UserAlbumModel.id)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def clear_for_user(self, user_id: str) -> int:
        """Delete all albums of a user."""
        result = await self.session.execute(
            delete(UserAlbumModel).where(UserAlbumModel.user_id == user_id)
        )
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    @staticmethod
    def _to_entity(model: UserAlbumModel) -> UserAlbum:
        return UserAlbum(
            user_id=model.user_id,
            album_name=model.album_name,
            artist_name=model.artist_name,
            primary_artist=model.primary_artist,
            album_image=model.album_image or "",
            spotify_album_id=model.spotify_album_id,
            added_at=ensure_utc_aware(model.added_at),
            last_synced=ensure_utc_aware(model.last_synced),
        )
