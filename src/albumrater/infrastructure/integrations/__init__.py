"""External API integrations."""

from albumrater.infrastructure.integrations.discogs_client import DiscogsClient
from albumrater.infrastructure.integrations.spotify_client import SpotifyClient

__all__ = ["DiscogsClient", "SpotifyClient"]
