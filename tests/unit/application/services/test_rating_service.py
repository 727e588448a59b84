"""Tests for the cached rating entry point."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from albumrater.application.services.rating_resolver import DiscogsRatingResolver
from albumrater.application.services.rating_service import RatingService
from albumrater.config.settings import DiscogsSettings
from albumrater.domain.ports import IDiscogsClient, IRatingStore
from albumrater.domain.value_objects import Found, NotFound, RatingQuery
from albumrater.infrastructure.persistence import Database, DatabaseRatingStore


@pytest.fixture
def store(database: Database) -> DatabaseRatingStore:
    """Rating store on the in-memory database."""
    return DatabaseRatingStore(database)


@pytest.fixture
def resolver() -> MagicMock:
    """Configured resolver that finds nothing unless told otherwise."""
    mock = MagicMock(spec=DiscogsRatingResolver)
    mock.is_configured = True
    mock.resolve = AsyncMock(return_value=NotFound())
    return mock


@pytest.fixture
def service(resolver: MagicMock, store: DatabaseRatingStore) -> RatingService:
    """Rating service under test."""
    return RatingService(resolver, store)


class TestCacheHits:
    """Stored outcomes never trigger resolution."""

    async def test_stored_rating_returned_without_lookup(
        self, service: RatingService, store: DatabaseRatingStore, resolver: MagicMock
    ) -> None:
        """("ok computer", "radiohead") -> 9.2 is a pure cache hit."""
        await store.save_rating("ok computer", "radiohead", Found(9.2))

        outcome = await service.resolve_with_cache("OK Computer", "Radiohead")

        assert outcome == Found(9.2)
        resolver.resolve.assert_not_awaited()

    async def test_stored_null_returned_without_lookup(
        self, service: RatingService, store: DatabaseRatingStore, resolver: MagicMock
    ) -> None:
        """A previous failed lookup is never retried automatically."""
        await store.save_rating("obscure ep", "unknown artist", NotFound())

        outcome = await service.resolve_with_cache("Obscure EP", "Unknown Artist")

        assert outcome == NotFound()
        resolver.resolve.assert_not_awaited()


class TestCacheMisses:
    """Unknown pairs are resolved once and persisted."""

    async def test_found_is_persisted_and_second_call_hits_cache(
        self, service: RatingService, store: DatabaseRatingStore, resolver: MagicMock
    ) -> None:
        """Two calls, one resolution."""
        resolver.resolve.return_value = Found(8.6)

        first = await service.resolve_with_cache("Kid A", "Radiohead")
        second = await service.resolve_with_cache("KID A", "radiohead")

        assert first == second == Found(8.6)
        resolver.resolve.assert_awaited_once_with(RatingQuery("Kid A", "Radiohead"))
        assert await store.get_rating("kid a", "radiohead") == Found(8.6)

    async def test_not_found_is_persisted_as_checked(
        self, service: RatingService, store: DatabaseRatingStore
    ) -> None:
        """NotFound is stored as an explicit NULL row, not left absent."""
        outcome = await service.resolve_with_cache("Obscure EP", "Unknown Artist")

        assert outcome == NotFound()
        assert await store.get_rating("obscure ep", "unknown artist") == NotFound()

    async def test_missing_token_outcome_is_persisted(
        self, store: DatabaseRatingStore, discogs_settings: DiscogsSettings
    ) -> None:
        """The token-less NotFound is saved like any other outcome."""
        client = MagicMock(spec=IDiscogsClient)
        client.is_configured = False
        service = RatingService(DiscogsRatingResolver(client, discogs_settings), store)

        outcome = await service.resolve_with_cache("Kid A", "Radiohead")

        assert outcome == NotFound()
        assert await store.get_rating("kid a", "radiohead") == NotFound()
        client.search_releases.assert_not_called()

    async def test_store_failure_propagates(self, resolver: MagicMock) -> None:
        """Database errors reach the caller; nothing is resolved."""
        failing_store = MagicMock(spec=IRatingStore)
        failing_store.get_rating = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("database is locked"))
        )
        service = RatingService(resolver, failing_store)

        with pytest.raises(OperationalError):
            await service.resolve_with_cache("Kid A", "Radiohead")
        resolver.resolve.assert_not_awaited()

    async def test_end_to_end_nothing_found(
        self, store: DatabaseRatingStore, discogs_settings: DiscogsSettings
    ) -> None:
        """Empty searches and no matching artist -> NULL row and NotFound."""
        client = MagicMock(spec=IDiscogsClient)
        client.is_configured = True
        client.search_releases = AsyncMock(return_value={"results": []})
        client.search_artists = AsyncMock(
            return_value={"results": [{"id": 1, "title": "Somebody Else"}]}
        )
        client.get_release = AsyncMock()
        client.get_artist_releases = AsyncMock()
        service = RatingService(DiscogsRatingResolver(client, discogs_settings), store)

        outcome = await service.resolve_with_cache("Obscure EP", "Unknown Artist")

        assert outcome == NotFound()
        assert await store.get_rating("obscure ep", "unknown artist") == NotFound()
        client.get_release.assert_not_awaited()
        client.get_artist_releases.assert_not_awaited()


class TestConcurrency:
    """Per-key serialization and cancellation."""

    async def test_concurrent_calls_resolve_once(
        self, service: RatingService, resolver: MagicMock
    ) -> None:
        """Parallel requests for one uncached album share a single resolution."""

        async def slow_resolve(query: RatingQuery) -> Found:
            for _ in range(5):
                await asyncio.sleep(0)
            return Found(7.0)

        resolver.resolve.side_effect = slow_resolve

        outcomes = await asyncio.gather(
            service.resolve_with_cache("Kid A", "Radiohead"),
            service.resolve_with_cache("kid a", "RADIOHEAD"),
            service.resolve_with_cache("Kid A", "Radiohead"),
        )

        assert outcomes == [Found(7.0)] * 3
        assert resolver.resolve.await_count == 1
        assert service._key_locks == {}

    async def test_cancelled_resolution_writes_nothing(
        self, service: RatingService, store: DatabaseRatingStore, resolver: MagicMock
    ) -> None:
        """Cancellation propagates and leaves the pair never-checked."""
        started = asyncio.Event()

        async def hang(query: RatingQuery) -> Found:
            started.set()
            await asyncio.Event().wait()
            return Found(1.0)

        resolver.resolve.side_effect = hang

        task = asyncio.create_task(service.resolve_with_cache("Kid A", "Radiohead"))
        await asyncio.wait_for(started.wait(), timeout=1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert await store.get_rating("Kid A", "Radiohead") is None
        assert service._key_locks == {}
