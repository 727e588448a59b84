"""albumrater - rate your saved Spotify albums with Discogs community ratings."""

__version__ = "0.1.0"
