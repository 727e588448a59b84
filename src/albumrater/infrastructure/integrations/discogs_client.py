"""Discogs HTTP client with sliding-window rate limiting and retry/backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, cast

import httpx

from albumrater.config.settings import DiscogsSettings
from albumrater.domain.ports import IDiscogsClient
from albumrater.infrastructure.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

MAX_RATE_LIMIT_BACKOFF_SECONDS = 60.0
RATE_LIMIT_BACKOFF_STEP_SECONDS = 5.0
SERVER_ERROR_BACKOFF_STEP_SECONDS = 1.0


def rate_limit_backoff(attempt: int) -> float:
    """Wait after a 429 on the given (1-based) attempt: 5s, 10s, ... capped at 60s."""
    return min(MAX_RATE_LIMIT_BACKOFF_SECONDS, RATE_LIMIT_BACKOFF_STEP_SECONDS * attempt)


def server_error_backoff(attempt: int) -> float:
    """Wait after a 5xx on the given (1-based) attempt: 1s, 2s, 3s, ..."""
    return SERVER_ERROR_BACKOFF_STEP_SECONDS * attempt


class DiscogsClient(IDiscogsClient):
    """HTTP client for the Discogs database API.

    Hey future me - every Discogs call goes through _request()! It owns the whole
    retry policy:
    - 2xx  -> parsed JSON
    - 429  -> wait min(60, 5*attempt)s, retry
    - 5xx  -> wait 1*attempt s, retry
    - else -> None right away (404, 401, ... won't get better by retrying)
    After max_attempts it gives up with None. HTTP status problems NEVER raise here,
    None is "no data". Transport errors and broken JSON DO raise, the resolver catches
    those per strategy.
    """

    def __init__(
        self,
        settings: DiscogsSettings,
        rate_limiter: SlidingWindowRateLimiter,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize Discogs client.

        Args:
            settings: Discogs configuration settings
            rate_limiter: Shared limiter for the Discogs quota
            sleep: Coroutine used for backoff waits
        """
        self.settings = settings
        self.rate_limiter = rate_limiter
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        """Check if a Discogs token is configured."""
        return self.settings.is_configured

    # Discogs rejects requests without a User-Agent, and unauthenticated requests only
    # get 25/min instead of 60/min - both headers go on every request.
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers={
                    "User-Agent": self.settings.user_agent,
                    "Authorization": f"Discogs token={self.settings.token}",
                    "Accept": "application/json",
                },
                timeout=self.settings.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, path: str, params: dict[str, Any] | None, context: str
    ) -> dict[str, Any] | None:
        """Issue one rate-limited GET with retries.

        Args:
            path: API path relative to base_url (e.g. "/releases/123")
            params: Query parameters
            context: Log prefix describing why we are calling

        Returns:
            Parsed JSON body, or None if no data could be obtained

        Raises:
            httpx.TransportError: On connection problems
            ValueError: If a 2xx body is not valid JSON
        """
        client = await self._get_client()
        max_attempts = self.settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            await self.rate_limiter.acquire()
            response = await client.get(path, params=params)

            if response.is_success:
                return cast(dict[str, Any], response.json())

            if response.status_code == 429:
                wait_time = rate_limit_backoff(attempt)
                logger.warning(
                    "%s: Rate limited (429), waiting %.0fs before retry %d/%d",
                    context,
                    wait_time,
                    attempt,
                    max_attempts,
                )
                await self._sleep(wait_time)
                continue

            if response.status_code >= 500:
                wait_time = server_error_backoff(attempt)
                logger.warning(
                    "%s: Server error (%d), waiting %.0fs before retry %d/%d",
                    context,
                    response.status_code,
                    wait_time,
                    attempt,
                    max_attempts,
                )
                await self._sleep(wait_time)
                continue

            logger.info("%s: Failed (%d)", context, response.status_code)
            return None

        logger.warning("%s: Failed after %d attempts", context, max_attempts)
        return None

    async def search_releases(
        self, query: str, per_page: int, context: str = ""
    ) -> dict[str, Any] | None:
        """Search album releases matching a free-text query."""
        return await self._request(
            "/database/search",
            {"q": query, "type": "release", "format": "album", "per_page": per_page},
            context or f"Release search '{query}'",
        )

    async def search_artists(
        self, name: str, per_page: int, context: str = ""
    ) -> dict[str, Any] | None:
        """Search artists by name."""
        return await self._request(
            "/database/search",
            {"q": name, "type": "artist", "per_page": per_page},
            context or f"Artist search '{name}'",
        )

    async def get_release(
        self, release_id: int | str, context: str = ""
    ) -> dict[str, Any] | None:
        """Get release detail including community.rating.average."""
        return await self._request(
            f"/releases/{release_id}", None, context or f"Release {release_id}"
        )

    async def get_artist_releases(
        self, artist_id: int | str, per_page: int, context: str = ""
    ) -> dict[str, Any] | None:
        """Get an artist's releases sorted by year, newest first."""
        return await self._request(
            f"/artists/{artist_id}/releases",
            {"sort": "year", "sort_order": "desc", "per_page": per_page},
            context or f"Artist {artist_id} releases",
        )

    async def __aenter__(self) -> "DiscogsClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
