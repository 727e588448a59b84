"""Configuration module for albumrater."""

from .settings import (
    DatabaseSettings,
    DiscogsSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "DiscogsSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "get_settings",
]
