"""
Error types raised by Flippin services.

Three kinds of failure reach callers: validation errors (rejected input),
capacity errors (free-tier card limit) and service errors (network,
storage). All of them are recoverable at the call site.
"""

from typing import Optional


class FlippinError(Exception):
    """Base exception for Flippin errors."""

    def __init__(self, message: str, details: str = ""):
        self.message = message
        self.details = details
        super().__init__(message)


class CardValidationError(FlippinError):
    """Raised when card input is rejected before persistence."""
    pass


class CardLimitError(FlippinError):
    """Raised when adding a card would exceed the free-tier card limit."""

    def __init__(self, limit: int, current_count: int):
        self.limit = limit
        self.current_count = current_count
        super().__init__(
            f"You've used {current_count} of {limit} free cards",
            details="Upgrade to add more cards",
        )


class TranslationError(FlippinError):
    """Raised when the translation provider fails or answers garbage."""

    def __init__(self, message: str, status: Optional[int] = None, details: str = ""):
        self.status = status
        super().__init__(message, details)


class AudioFetchError(FlippinError):
    """Raised when speech audio cannot be produced."""
    pass


class StorageError(FlippinError):
    """Raised when the local database cannot be read or written."""
    pass
