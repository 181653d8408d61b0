"""
Session termination.

Clears local credentials and tells upstream listeners (UI state, CLI) that
the session is gone. Termination is idempotent: concurrent and repeated calls
collapse into one until the terminator is re-armed by a new login.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

from core.types import CredentialProvider

logger = logging.getLogger(__name__)

SessionListener = Callable[[str], Union[None, Awaitable[Any]]]

DEFAULT_REASON = "session_expired"


class SessionTerminator:
    """
    Ends the local session exactly once.

    Listeners receive the termination reason and may be plain functions or
    coroutine functions. A failing listener is logged and does not prevent
    the remaining listeners from running; credentials are cleared before any
    listener is called.

    Usage:
        terminator = SessionTerminator(store)
        terminator.add_listener(lambda reason: print("logged out:", reason))
        await terminator.terminate("refresh_rejected")
        ...
        terminator.rearm()  # after a new login
    """

    def __init__(self, credentials: CredentialProvider):
        self.credentials = credentials
        self._listeners: List[SessionListener] = []
        self._terminated = False
        self._reason: Optional[str] = None
        self._notifying: Optional[asyncio.Future] = None

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def add_listener(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def rearm(self) -> None:
        """Allow the next terminate() call to run again."""
        if self._terminated:
            logger.debug("Session terminator re-armed", extra={"reason": self._reason})
        self._terminated = False
        self._reason = None
        self._notifying = None

    async def terminate(self, reason: str = DEFAULT_REASON) -> bool:
        """
        Clear credentials and notify listeners.

        Returns:
            True if this call performed the termination, False if it joined or
            repeated an earlier one.
        """
        if self._terminated:
            logger.debug(
                "Session already terminated",
                extra={"reason": reason, "operation": "terminate"},
            )
            if self._notifying is not None:
                await asyncio.shield(self._notifying)
            return False

        # Flag is set before the first await so concurrent callers collapse
        self._terminated = True
        self._reason = reason
        self.credentials.clear()

        logger.warning(
            "Session terminated",
            extra={"reason": reason, "listeners": len(self._listeners)},
        )

        self._notifying = asyncio.ensure_future(self._notify(reason, list(self._listeners)))
        await asyncio.shield(self._notifying)
        return True

    async def _notify(self, reason: str, listeners: List[SessionListener]) -> None:
        for listener in listeners:
            try:
                result = listener(reason)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "Session listener failed",
                    extra={
                        "reason": reason,
                        "error_type": type(e).__name__,
                        "error_message": str(e)[:200],
                    },
                    exc_info=True,
                )


__all__ = ["DEFAULT_REASON", "SessionListener", "SessionTerminator"]
