"""
In-memory holder for the short-lived access credential.

The access credential is process-local and never persisted. The long-lived
session credential lives in the HTTP session's cookie jar and is not visible
here.

Example:
    >>> store = CredentialStore()
    >>> store.set("eyJhbGciOi...")
    >>> store.has_credential
    True
    >>> store.clear()
    >>> store.get() is None
    True
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Single current access credential.

    Satisfies core.types.CredentialProvider. Reads are synchronous so the
    interceptor can attach the header without yielding to the event loop.
    """

    def __init__(self, token: Optional[str] = None):
        self._token: Optional[str] = None
        if token:
            self.set(token)

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        if not token:
            raise ValueError("Access credential must be a non-empty string")

        replaced = self._token is not None
        self._token = token
        logger.info(
            "Access credential stored",
            extra={"operation": "replace" if replaced else "set"},
        )

    def clear(self) -> None:
        if self._token is None:
            logger.debug("Access credential already cleared")
            return
        self._token = None
        logger.info("Access credential cleared", extra={"operation": "clear"})

    @property
    def has_credential(self) -> bool:
        return self._token is not None

    def __repr__(self) -> str:
        # Never expose the token value
        state = "set" if self._token else "empty"
        return f"CredentialStore({state})"


__all__ = ["CredentialStore"]
