"""Tests for the sliding window and token bucket rate limiters."""

import asyncio

import pytest

from albumrater.infrastructure.rate_limiter import (
    RateLimiter,
    RateLimiterConfig,
    SlidingWindowRateLimiter,
    get_spotify_limiter,
)


class FakeClock:
    """Manually advanced monotonic clock; sleeping advances it."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock shared by limiter and test."""
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> SlidingWindowRateLimiter:
    """Discogs-shaped limiter (60 per 60s, 100ms margin) on a fake clock."""
    return SlidingWindowRateLimiter(
        max_requests=60,
        window_seconds=60.0,
        safety_margin_seconds=0.1,
        clock=clock,
        sleep=clock.sleep,
    )


class TestSlidingWindowRateLimiter:
    """Test sliding window quota enforcement."""

    async def test_first_sixty_acquisitions_do_not_wait(
        self, limiter: SlidingWindowRateLimiter, clock: FakeClock
    ) -> None:
        """A full quota is available immediately."""
        for _ in range(60):
            await limiter.acquire()

        assert clock.sleeps == []
        assert limiter.in_window == 60

    async def test_sixty_first_waits_for_oldest_plus_margin(
        self, limiter: SlidingWindowRateLimiter, clock: FakeClock
    ) -> None:
        """The 61st request waits until the oldest leaves the window, plus 100ms."""
        start = clock.now
        for _ in range(60):
            await limiter.acquire()
            clock.now += 0.5
        elapsed = clock.now - start

        await limiter.acquire()

        assert len(clock.sleeps) == 1
        assert clock.sleeps[0] == pytest.approx(60.0 - elapsed + 0.1)
        assert clock.now - start == pytest.approx(60.1)

    async def test_entries_expire_after_window(
        self, limiter: SlidingWindowRateLimiter, clock: FakeClock
    ) -> None:
        """Old timestamps no longer count against the quota."""
        for _ in range(60):
            await limiter.acquire()

        clock.now += 60.0

        assert limiter.in_window == 0
        await limiter.acquire()
        assert clock.sleeps == []

    async def test_rechecks_after_waking(self, clock: FakeClock) -> None:
        """A slot taken while sleeping forces another wait."""
        limiter = SlidingWindowRateLimiter(
            max_requests=1,
            window_seconds=10.0,
            safety_margin_seconds=0.0,
            clock=clock,
            sleep=clock.sleep,
        )
        await limiter.acquire()

        original_sleep = clock.sleep
        stolen = False

        async def sleep_and_steal(seconds: float) -> None:
            nonlocal stolen
            await original_sleep(seconds)
            if not stolen:
                stolen = True
                # Another caller grabs the slot that just freed up
                limiter._requests.append(clock.now)

        limiter._sleep = sleep_and_steal

        await limiter.acquire()

        assert clock.sleeps == [10.0, 10.0]

    async def test_concurrent_callers_share_quota(self, clock: FakeClock) -> None:
        """Concurrent tasks never exceed the quota inside one window."""
        limiter = SlidingWindowRateLimiter(
            max_requests=3,
            window_seconds=10.0,
            safety_margin_seconds=0.1,
            clock=clock,
            sleep=clock.sleep,
        )
        granted: list[float] = []

        async def worker() -> None:
            await limiter.acquire()
            granted.append(clock.now)

        await asyncio.gather(*(worker() for _ in range(6)))

        assert len(granted) == 6
        for index, timestamp in enumerate(granted):
            in_window = [t for t in granted[: index + 1] if timestamp - t < 10.0]
            assert len(in_window) <= 3

    def test_rejects_zero_quota(self) -> None:
        """A limiter that never permits anything is a configuration error."""
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(max_requests=0)


class TestTokenBucketRateLimiter:
    """Test the Spotify token bucket."""

    def test_starts_full(self) -> None:
        """Bucket starts at capacity."""
        limiter = RateLimiter(config=RateLimiterConfig(max_tokens=5))
        assert limiter.available_tokens == pytest.approx(5.0, abs=0.5)

    async def test_context_manager_consumes_token(self) -> None:
        """Each request takes one token."""
        limiter = RateLimiter(config=RateLimiterConfig(max_tokens=5, refill_rate=0.001))

        async with limiter:
            pass

        assert limiter.available_tokens == pytest.approx(4.0, abs=0.01)

    async def test_rate_limit_response_honours_retry_after(self, mocker) -> None:
        """Retry-After wins over the backoff level, and backoff grows."""
        sleep = mocker.patch(
            "albumrater.infrastructure.rate_limiter.asyncio.sleep",
            new=mocker.AsyncMock(),
        )
        limiter = RateLimiter.for_spotify()

        wait = await limiter.handle_rate_limit_response(retry_after=3)

        assert wait == 3.0
        sleep.assert_awaited_once_with(3.0)
        assert limiter._current_backoff == 2.0

        limiter.reset_backoff()
        assert limiter._current_backoff == 1.0

    def test_spotify_limiter_is_singleton(self) -> None:
        """All Spotify requests share one bucket."""
        assert get_spotify_limiter() is get_spotify_limiter()
        assert get_spotify_limiter().name == "spotify"
