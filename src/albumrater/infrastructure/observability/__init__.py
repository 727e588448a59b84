"""Observability - structured logging and correlation IDs."""

from albumrater.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)

__all__ = ["configure_logging", "get_correlation_id", "set_correlation_id"]
