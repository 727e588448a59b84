"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is stored as an attribute so callers can inspect it without
    # parsing str(exception). Don't raise this directly - use a specific subclass.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationException(DomainException):
    """Raised when a value object or entity fails validation."""

    pass


class ConfigurationError(DomainException):
    """Raised when a required setting is missing or unusable.

    Example: no Discogs token configured, or the SQLite directory is not writable.
    """

    pass


__all__ = [
    "ConfigurationError",
    "DomainException",
    "EntityNotFoundException",
    "ValidationException",
]
