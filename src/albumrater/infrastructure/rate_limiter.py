"""
Rate limiters for external API calls.

Hey future me - two algorithms live here, one per upstream:

SLIDING WINDOW (Discogs):
- Discogs allows 60 authenticated requests per rolling minute
- We remember the timestamp of every permitted request inside the window
- If the window is full: sleep until the oldest entry falls out (+100ms margin),
  then CHECK AGAIN - another coroutine may have grabbed the slot meanwhile

TOKEN BUCKET (Spotify):
- Bucket has max_tokens capacity, refilled with refill_rate/sec
- Each request consumes 1 token, burst-friendly
- Adaptive backoff on 429 (1s, 2s, 4s, ...), reset after success

USAGE:
    limiter = SlidingWindowRateLimiter(max_requests=60, window_seconds=60.0)
    await limiter.acquire()
    response = await client.get(url)

    bucket = get_spotify_limiter()
    async with bucket:
        response = await client.get(url)
"""

import asyncio
import logging
import math
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


class SlidingWindowRateLimiter:
    """Sliding-window limiter: at most max_requests per trailing window_seconds.

    One instance is shared by every caller that talks to the same upstream, the
    lifecycle creates it and injects it into the client. The asyncio.Lock covers the
    prune/check/record sequence; it is released while sleeping.

    Attributes:
        max_requests: Quota per window
        window_seconds: Window length
        safety_margin_seconds: Extra wait added after the oldest request expires
    """

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: float = 60.0,
        safety_margin_seconds: float = 0.1,
        name: str = "discogs",
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.safety_margin_seconds = safety_margin_seconds
        self._name = name
        self._clock = clock
        self._sleep = sleep
        self._requests: deque[float] = deque()
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        """Drop timestamps that left the window."""
        while self._requests and now - self._requests[0] >= self.window_seconds:
            self._requests.popleft()

    def _wait_time(self, now: float) -> float:
        """Seconds until the oldest request leaves the window, plus the margin."""
        oldest = self._requests[0]
        return self.window_seconds - (now - oldest) + self.safety_margin_seconds

    async def acquire(self) -> None:
        """Wait until a request fits into the window, then record it."""
        while True:
            async with self._lock:
                now = self._clock()
                self._prune(now)
                if len(self._requests) < self.max_requests:
                    self._requests.append(now)
                    return
                wait_time = self._wait_time(now)

            logger.info(
                "RateLimiter[%s]: limit reached, waiting %ds...",
                self._name,
                math.ceil(wait_time),
            )
            await self._sleep(wait_time)

    @property
    def in_window(self) -> int:
        """Number of requests currently counted against the quota (for debugging)."""
        self._prune(self._clock())
        return len(self._requests)

    @property
    def name(self) -> str:
        """Get limiter name for logging."""
        return self._name


@dataclass
class RateLimiterConfig:
    """Configuration for the token bucket limiter.

    Defaults are conservative for Spotify (roughly 180 requests/minute upstream).
    """

    max_tokens: int = 10
    refill_rate: float = 2.0
    max_backoff_seconds: float = 600.0
    initial_backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0


@dataclass
class RateLimiter:
    """Token bucket rate limiter with adaptive backoff."""

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)

    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default_factory=time.monotonic, init=False)
    _current_backoff: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    _name: str = field(default="default", init=False)

    def __post_init__(self) -> None:
        """Initialize tokens to max capacity."""
        self._tokens = float(self.config.max_tokens)
        self._current_backoff = self.config.initial_backoff_seconds

    @classmethod
    def for_spotify(cls) -> "RateLimiter":
        """Create rate limiter for the Spotify Web API.

        Spotify may send Retry-After values of several minutes, so max_backoff
        stays at 600s.
        """
        limiter = cls(
            config=RateLimiterConfig(
                max_tokens=10,
                refill_rate=2.0,
                max_backoff_seconds=600.0,
                initial_backoff_seconds=1.0,
            )
        )
        limiter._name = "spotify"
        return limiter

    def _refill_tokens(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(
            self.config.max_tokens, self._tokens + elapsed * self.config.refill_rate
        )
        self._last_refill = now

    async def acquire(self) -> None:
        """Acquire one token, waiting if necessary."""
        async with self._lock:
            self._refill_tokens()

            while self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self.config.refill_rate
                logger.debug(
                    "RateLimiter[%s]: No tokens available, waiting %.2fs",
                    self._name,
                    wait_time,
                )

                # Release lock while waiting
                self._lock.release()
                await asyncio.sleep(wait_time)
                await self._lock.acquire()

                self._refill_tokens()

            self._tokens -= 1.0

    async def handle_rate_limit_response(self, retry_after: int | None = None) -> float:
        """Handle a 429 response with adaptive backoff.

        Args:
            retry_after: Retry-After header from API response (seconds)

        Returns:
            The actual wait time used
        """
        async with self._lock:
            wait_time = (
                float(retry_after) if retry_after is not None else self._current_backoff
            )
            wait_time = min(wait_time, self.config.max_backoff_seconds)

            logger.warning(
                "RateLimiter[%s]: 429 Rate Limited! Waiting %.1fs before retry "
                "(backoff level: %.1fs)",
                self._name,
                wait_time,
                self._current_backoff,
            )

            self._current_backoff = min(
                self._current_backoff * self.config.backoff_multiplier,
                self.config.max_backoff_seconds,
            )
            self._tokens = 0.0

        # Wait outside lock
        await asyncio.sleep(wait_time)
        return wait_time

    def reset_backoff(self) -> None:
        """Reset backoff after a successful request."""
        self._current_backoff = self.config.initial_backoff_seconds

    async def __aenter__(self) -> "RateLimiter":
        """Enter async context - acquire token."""
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        """Exit async context, resetting backoff on success."""
        if exc_type is None:
            self.reset_backoff()

    @property
    def available_tokens(self) -> float:
        """Get current available tokens (for debugging)."""
        self._refill_tokens()
        return self._tokens

    @property
    def name(self) -> str:
        """Get limiter name for logging."""
        return self._name


# Module-level Spotify bucket, shared by all Spotify requests in the process.
_spotify_limiter: RateLimiter | None = None


def get_spotify_limiter() -> RateLimiter:
    """Get singleton Spotify rate limiter."""
    global _spotify_limiter
    if _spotify_limiter is None:
        _spotify_limiter = RateLimiter.for_spotify()
    return _spotify_limiter


__all__ = [
    "RateLimiter",
    "RateLimiterConfig",
    "SlidingWindowRateLimiter",
    "get_spotify_limiter",
]
