# Hey future me - this is where a Spotify album becomes a Discogs rating!
#
# Resolution is a small state machine, each stage only runs if the previous one came
# up empty:
#   DIRECT_SEARCH_LIGHT      - "<album> <artist>" with only (...)/[...] stripped
#   DIRECT_SEARCH_AGGRESSIVE - same search with fully normalized strings, then the
#                              remaining title variants (only if the light search had
#                              ZERO results, not merely no rating)
#   ARTIST_RELEASE_FALLBACK  - find the artist, scan their releases for the album
#   EXHAUSTED                - NotFound
#
# Every stage swallows its own exceptions (logged) so one broken response never kills
# the whole lookup. CancelledError is a BaseException and is NOT caught here.
"""Rating resolver - multi-strategy Discogs lookup for one album."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from albumrater.application.services.title_matcher import (
    MatchKind,
    classify_title_match,
    find_best_artist_match,
)
from albumrater.domain.entities import SearchCandidate
from albumrater.domain.value_objects import (
    Found,
    NotFound,
    RatingOutcome,
    RatingQuery,
    generate_variants,
    light_clean,
    normalize,
    normalize_catalog_rating,
)

if TYPE_CHECKING:
    from albumrater.config.settings import DiscogsSettings
    from albumrater.domain.ports import IDiscogsClient

logger = logging.getLogger(__name__)


class ResolutionStage(str, Enum):
    """Stages of a rating lookup, in the order they run."""

    DIRECT_SEARCH_LIGHT = "direct_search_light_clean"
    DIRECT_SEARCH_AGGRESSIVE = "direct_search_aggressive_clean"
    ARTIST_RELEASE_FALLBACK = "artist_release_fallback"
    EXHAUSTED = "exhausted"


def community_average(detail: dict[str, Any] | None) -> float | None:
    """Extract community.rating.average from a release detail payload.

    A missing, null or zero average all mean "no rating" - Discogs reports 0 for
    releases nobody has rated yet.
    """
    if not detail:
        return None
    community = detail.get("community") or {}
    rating = community.get("rating") or {}
    average = rating.get("average")
    if not average:
        return None
    return float(average)


class DiscogsRatingResolver:
    """Resolve a Discogs community rating for an album/artist pair.

    Do NOT call this directly from sync code - go through RatingService so the result
    gets cached. Calling resolve() twice for the same album spends Discogs quota twice.

    Usage:
        resolver = DiscogsRatingResolver(discogs_client, settings.discogs)
        outcome = await resolver.resolve(RatingQuery("OK Computer", "Radiohead"))
    """

    def __init__(self, client: IDiscogsClient, settings: DiscogsSettings) -> None:
        """Initialize resolver.

        Args:
            client: Discogs API client (rate limiting and retries live there)
            settings: Discogs settings (page sizes and detail fetch limit)
        """
        self._client = client
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        """Check if the underlying client has a token."""
        return self._client.is_configured

    async def resolve(self, query: RatingQuery) -> RatingOutcome:
        """Run all strategies until one yields a rating.

        Args:
            query: Album and (primary) artist to look up

        Returns:
            Found with a 0-10 rating, or NotFound if every strategy came up empty
        """
        if not self.is_configured:
            logger.warning("%s: No Discogs token configured", query)
            return NotFound()

        logger.info("%s: Starting Discogs search...", query)

        try:
            found = await self._direct_search(query)
        except Exception as e:
            logger.warning("%s: Direct search failed: %s", query, e, exc_info=True)
            found = None
        if found is not None:
            return found

        try:
            found = await self._artist_release_fallback(query)
        except Exception as e:
            logger.warning(
                "%s: Error searching artist releases: %s", query, e, exc_info=True
            )
            found = None
        if found is not None:
            return found

        logger.info(
            "%s: No rating found via direct search or artist releases (%s)",
            query,
            ResolutionStage.EXHAUSTED.value,
        )
        return NotFound()

    # =========================================================================
    # DIRECT SEARCH
    # =========================================================================

    async def _search_results(
        self, query: RatingQuery, search_query: str, stage: ResolutionStage
    ) -> list[dict[str, Any]]:
        logger.info('%s: Direct search query: "%s" (%s)', query, search_query, stage.value)
        data = await self._client.search_releases(
            search_query,
            per_page=self._settings.direct_search_per_page,
            context=f"{query} [{stage.value}]",
        )
        if not data:
            return []
        return list(data.get("results") or [])

    async def _direct_search(self, query: RatingQuery) -> Found | None:
        """Search releases directly, widening the query only on an empty result set."""
        search_query = (
            f"{light_clean(query.album_name)} {light_clean(query.artist_name)}"
        )
        results = await self._search_results(
            query, search_query, ResolutionStage.DIRECT_SEARCH_LIGHT
        )

        if not results:
            results = await self._aggressive_search(query)

        if not results:
            logger.info("%s: Direct search returned no results", query)
            return None

        for result in results[: self._settings.direct_search_detail_limit]:
            release_id = result.get("id")
            if release_id is None:
                continue
            detail = await self._client.get_release(
                release_id, context=f"{query} [release {release_id}]"
            )
            average = community_average(detail)
            if average:
                rating = normalize_catalog_rating(average)
                logger.info("%s: Rating %s/10 - found via direct search", query, rating)
                return Found(rating)

        logger.info(
            "%s: %d direct search results but none carried a rating",
            query,
            len(results),
        )
        return None

    async def _aggressive_search(self, query: RatingQuery) -> list[dict[str, Any]]:
        """Fully normalized search, then the album's title variants, most specific first."""
        normalized_artist = normalize(query.artist_name)
        search_query = f"{normalize(query.album_name)} {normalized_artist}"
        sent = {search_query}
        results = await self._search_results(
            query, search_query, ResolutionStage.DIRECT_SEARCH_AGGRESSIVE
        )
        if results:
            return results

        # First variant is the original title, already covered above
        for variant in generate_variants(query.album_name)[1:]:
            normalized_variant = normalize(variant)
            if not normalized_variant:
                continue
            search_query = f"{normalized_variant} {normalized_artist}"
            if search_query in sent:
                continue
            sent.add(search_query)
            results = await self._search_results(
                query, search_query, ResolutionStage.DIRECT_SEARCH_AGGRESSIVE
            )
            if results:
                return results

        return []

    # =========================================================================
    # ARTIST RELEASE FALLBACK
    # =========================================================================

    async def _artist_release_fallback(self, query: RatingQuery) -> Found | None:
        """Find the artist, then scan their releases for the album title.

        Hey future me - the scan is asymmetric ON PURPOSE:
        - exact title match without a rating -> STOP (that release IS the album, other
          releases won't be more authoritative)
        - partial match without a rating -> keep scanning
        Don't "fix" this into a uniform rule.
        """
        logger.info("%s: Searching artist's releases as fallback", query)

        artist_data = await self._client.search_artists(
            query.artist_name,
            per_page=self._settings.artist_search_per_page,
            context=f"{query} [artist search]",
        )
        artist_results = (artist_data or {}).get("results") or []
        if not artist_results:
            logger.info("%s: No artists found", query)
            return None

        candidates = [SearchCandidate.from_api(result) for result in artist_results]
        artist = find_best_artist_match(query.artist_name, candidates)
        if artist is None:
            logger.info(
                "%s: No matching artist found among %d results",
                query,
                len(candidates),
            )
            return None

        releases_data = await self._client.get_artist_releases(
            artist.id,
            per_page=self._settings.artist_releases_per_page,
            context=f"{query} [artist {artist.id} releases]",
        )
        releases = (releases_data or {}).get("releases") or []

        for release in releases:
            candidate = SearchCandidate.from_api(release)
            kind = classify_title_match(query.album_name, candidate.title)
            if kind is MatchKind.NONE:
                continue

            logger.info(
                '%s: Found %s match "%s" in artist releases',
                query,
                kind.value,
                candidate.title,
            )
            detail = await self._client.get_release(
                candidate.id, context=f"{query} [release {candidate.id}]"
            )
            average = community_average(detail)
            if average:
                rating = normalize_catalog_rating(average)
                logger.info(
                    '%s: Rating %s/10 - found via artist releases ("%s")',
                    query,
                    rating,
                    candidate.title,
                )
                return Found(rating)

            if kind is MatchKind.EXACT:
                logger.info(
                    '%s: Exact match "%s" has no rating, stopping scan',
                    query,
                    candidate.title,
                )
                return None

        logger.info(
            "%s: No matching album found in %d releases", query, len(releases)
        )
        return None


__all__ = ["DiscogsRatingResolver", "ResolutionStage", "community_average"]
