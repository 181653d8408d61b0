"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from enum import Enum
from typing import Optional, Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    This enum is used throughout the client to classify errors and determine
    whether a failed call is recoverable.

    Categories:
        TRANSIENT: Temporary failures that may succeed later
                   (e.g., network timeouts, 429/503 errors)
        AUTH: Authentication failures requiring credential refresh
              (e.g., 401 errors, expired access tokens)
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., 404, validation errors)
        TERMINAL: The session cannot be recovered locally
                  (e.g., the refresh endpoint itself rejected the session)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    TERMINAL = "terminal"
    UNKNOWN = "unknown"


class CredentialProvider(Protocol):
    """
    Protocol for the holder of the short-lived access credential.

    The authenticated pipeline is constructed with an implementation of this
    protocol instead of importing a global store, so any state container
    (in-memory store, UI store adapter, test double) can back it.
    """

    def get(self) -> Optional[str]:
        """Return the current access credential, or None when signed out."""
        ...

    def set(self, token: str) -> None:
        """Replace the current access credential."""
        ...

    def clear(self) -> None:
        """Drop the current access credential."""
        ...


__all__ = [
    "ErrorCategory",
    "CredentialProvider",
]
