"""Spotify HTTP client for reading the user's album library."""

import logging
from typing import Any, cast

import httpx

from albumrater.config.settings import SpotifySettings
from albumrater.domain.ports import ISpotifyClient
from albumrater.infrastructure.rate_limiter import RateLimiter, get_spotify_limiter

logger = logging.getLogger(__name__)


class SpotifyClient(ISpotifyClient):
    """HTTP client for Spotify Web API library reads.

    The OAuth dance happens elsewhere - this client only needs an access token.
    """

    # Hey future me, we DON'T create the HTTP client here, it gets lazy-loaded in
    # _get_client() so construction works outside a running event loop.
    def __init__(
        self, settings: SpotifySettings, rate_limiter: RateLimiter | None = None
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            rate_limiter: Token bucket limiter (defaults to the shared Spotify bucket)
        """
        self.settings = settings
        self.rate_limiter = rate_limiter or get_spotify_limiter()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Hey future me - ALL Spotify calls go through here! Token bucket first, then on 429
    # we respect Retry-After via the limiter's adaptive backoff. After max_retries we raise
    # HTTPStatusError so the caller sees the 429 instead of an empty library.
    async def _api_request(
        self,
        method: str,
        url: str,
        access_token: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make rate-limited API request with automatic retry on 429.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Full URL to request
            access_token: OAuth access token
            params: Query parameters

        Returns:
            httpx.Response object

        Raises:
            httpx.HTTPStatusError: If still rate limited after all retries
        """
        client = await self._get_client()
        headers = {"Authorization": f"Bearer {access_token}"}
        max_retries = self.settings.max_retries

        for attempt in range(max_retries + 1):
            async with self.rate_limiter:
                response = await client.request(
                    method=method, url=url, params=params, headers=headers
                )

            if response.status_code != 429:
                return response

            retry_after_str = response.headers.get("Retry-After")
            retry_after = int(retry_after_str) if retry_after_str else None

            if attempt >= max_retries:
                error_msg = (
                    f"Spotify API rate limited (429) after {max_retries} retries. "
                    f"URL: {url}. Retry-After: {retry_after or 'not provided'} seconds."
                )
                logger.error(error_msg)
                raise httpx.HTTPStatusError(
                    error_msg, request=response.request, response=response
                )

            wait_time = await self.rate_limiter.handle_rate_limit_response(retry_after)
            logger.warning(
                "Spotify 429 Rate Limit (attempt %d/%d): waited %.1fs, retrying %s",
                attempt + 1,
                max_retries,
                wait_time,
                url,
            )

        return response

    async def get_saved_albums(
        self, access_token: str, limit: int = 50, offset: int = 0
    ) -> dict[str, Any]:
        """Get one page of the user's Saved Albums.

        Args:
            access_token: OAuth access token (needs "user-library-read" scope)
            limit: Maximum number of albums to return (1-50)
            offset: The index of the first album to return

        Returns:
            Paginated response with items ({added_at, album}), total, limit, offset

        Raises:
            httpx.HTTPError: If the request fails
        """
        limit = min(limit, 50)

        response = await self._api_request(
            method="GET",
            url=f"{self.settings.api_base_url}/me/albums",
            access_token=access_token,
            params={"limit": limit, "offset": offset},
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def get_all_saved_albums(self, access_token: str) -> list[dict[str, Any]]:
        """Page through the whole library.

        Stops once `total` items are collected, or on an empty page (the library can
        shrink while we page).
        """
        limit = self.settings.page_size
        offset = 0
        total = 1
        items: list[dict[str, Any]] = []

        while len(items) < total:
            page = await self.get_saved_albums(access_token, limit=limit, offset=offset)
            page_items = page.get("items") or []
            total = int(page.get("total", 0))
            items.extend(page_items)
            logger.info(
                "Fetched %d albums from Spotify (%d/%d)",
                len(page_items),
                len(items),
                total,
            )
            if not page_items:
                break
            offset += limit

        return items

    async def __aenter__(self) -> "SpotifyClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
