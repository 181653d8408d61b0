"""
Single-flight credential refresh.

When an ordinary call fails with 401 the coordinator makes sure at most one
refresh is in flight. The first failing call starts it; every other failing
call that arrives meanwhile parks as a PendingWaiter and is settled with the
outcome of that one refresh.

State machine:
    IDLE --auth failure--> REFRESHING   (start refresh, caller awaits it)
    REFRESHING --auth failure--> REFRESHING   (caller queued as waiter)
    REFRESHING --success--> IDLE   (store credential, resolve all waiters)
    REFRESHING --failure/timeout--> IDLE   (terminate session, reject all waiters)

Everything runs on one event loop. The IDLE check and the switch to
REFRESHING happen with no await in between, so no lock is needed.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from core.auth.terminator import SessionTerminator
from core.errors.exceptions import RefreshFailedError
from core.http.models import ApiRequest
from core.types import CredentialProvider

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_TIMEOUT_SECONDS = 10.0

RefreshCall = Callable[[], Awaitable[str]]


class RefreshState(Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshOutcome(Enum):
    """Result of handing an auth failure to the coordinator."""

    RETRY = "retry"


def _new_future() -> asyncio.Future:
    return asyncio.get_running_loop().create_future()


@dataclass
class PendingWaiter:
    """
    A failed call parked until the in-flight refresh completes.

    Settled exactly once. A second settle is a logged no-op, and a waiter
    whose caller was cancelled is skipped.
    """

    request: ApiRequest
    future: asyncio.Future = field(default_factory=_new_future)

    @property
    def settled(self) -> bool:
        return self.future.done()

    def _can_settle(self, action: str) -> bool:
        if not self.future.done():
            return True
        if self.future.cancelled():
            logger.debug(
                "Skipping cancelled waiter",
                extra={"request_id": self.request.request_id, "operation": action},
            )
        else:
            logger.warning(
                "Waiter already settled, ignoring",
                extra={"request_id": self.request.request_id, "operation": action},
            )
        return False

    def resolve(self) -> bool:
        if not self._can_settle("resolve"):
            return False
        self.future.set_result(RefreshOutcome.RETRY)
        return True

    def reject(self, error: BaseException) -> bool:
        if not self._can_settle("reject"):
            return False
        self.future.set_exception(error)
        return True


class RefreshCoordinator:
    """
    Serializes credential refreshes across concurrent failing calls.

    Args:
        refresh_call: Coroutine function performing the refresh and returning
            the new access credential
        credentials: Store that receives the new credential
        terminator: Session terminator invoked when the refresh fails
        timeout_seconds: Upper bound for one refresh; None disables it

    Usage:
        coordinator = RefreshCoordinator(refresh_call, store, terminator)
        await coordinator.handle_auth_failure(request)  # RETRY or raises
        response = await dispatcher.replay(request)
    """

    def __init__(
        self,
        refresh_call: RefreshCall,
        credentials: CredentialProvider,
        terminator: SessionTerminator,
        timeout_seconds: Optional[float] = DEFAULT_REFRESH_TIMEOUT_SECONDS,
    ):
        self._refresh_call = refresh_call
        self.credentials = credentials
        self.terminator = terminator
        self.timeout_seconds = timeout_seconds

        self._state = RefreshState.IDLE
        self._waiters: List[PendingWaiter] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending_count(self) -> int:
        return len(self._waiters)

    async def handle_auth_failure(self, request: ApiRequest) -> RefreshOutcome:
        """
        Hand off a call that failed with 401.

        Marks the request retried, then either starts a refresh or queues
        behind the one in flight.

        Returns:
            RefreshOutcome.RETRY once the new credential is stored

        Raises:
            RefreshFailedError: the refresh failed; the session is terminated
        """
        request.mark_retried()

        if self._state is RefreshState.REFRESHING:
            waiter = PendingWaiter(request)
            self._waiters.append(waiter)
            logger.debug(
                "Refresh in flight, queueing request",
                extra={
                    "request_id": request.request_id,
                    "api_endpoint": request.path,
                    "pending_waiters": len(self._waiters),
                },
            )
            return await waiter.future

        task = self._begin_refresh()
        logger.info(
            "Access credential expired, refreshing",
            extra={"request_id": request.request_id, "api_endpoint": request.path},
        )
        await asyncio.shield(task)
        return RefreshOutcome.RETRY

    async def refresh(self) -> str:
        """
        Refresh the access credential, joining an in-flight refresh if any.

        Returns:
            The new access credential

        Raises:
            RefreshFailedError: the refresh failed; the session is terminated
        """
        if self._state is RefreshState.REFRESHING and self._task is not None:
            logger.debug("Joining in-flight refresh")
            return await asyncio.shield(self._task)

        return await asyncio.shield(self._begin_refresh())

    def _begin_refresh(self) -> asyncio.Task:
        self._state = RefreshState.REFRESHING
        self._task = asyncio.ensure_future(self._run_refresh())
        self._task.add_done_callback(self._consume_task_result)
        return self._task

    @staticmethod
    def _consume_task_result(task: asyncio.Task) -> None:
        # Every caller may have been cancelled; retrieve the outcome so the
        # loop does not report an unretrieved exception.
        if not task.cancelled():
            task.exception()

    async def _run_refresh(self) -> str:
        loop = asyncio.get_running_loop()
        start = loop.time()

        try:
            if self.timeout_seconds is None:
                token = await self._refresh_call()
            else:
                token = await asyncio.wait_for(self._refresh_call(), self.timeout_seconds)
            if not token:
                raise RefreshFailedError(
                    "Refresh response did not contain an access credential",
                    reason="invalid_response",
                )
        except asyncio.CancelledError:
            self._fail_waiters(
                RefreshFailedError("Credential refresh was cancelled", reason="cancelled")
            )
            raise
        except asyncio.TimeoutError as e:
            error = RefreshFailedError(
                f"Credential refresh timed out after {self.timeout_seconds}s",
                reason="timeout",
                cause=e,
                context={"timeout_seconds": self.timeout_seconds},
            )
            await self._fail(error, loop.time() - start)
            raise error from e
        except RefreshFailedError as e:
            await self._fail(e, loop.time() - start)
            raise
        except Exception as e:
            error = RefreshFailedError(
                f"Credential refresh failed: {e}",
                reason="refresh_error",
                status_code=getattr(e, "status_code", None),
                cause=e,
            )
            await self._fail(error, loop.time() - start)
            raise error from e

        self.credentials.set(token)
        # A live credential means a live session; the next failure must end it again
        self.terminator.rearm()
        waiters = self._drain()
        self._state = RefreshState.IDLE

        for waiter in waiters:
            waiter.resolve()

        logger.info(
            "Access credential refreshed",
            extra={
                "waiters_flushed": len(waiters),
                "duration_ms": round((loop.time() - start) * 1000, 2),
            },
        )
        return token

    async def _fail(self, error: RefreshFailedError, duration: float) -> None:
        waiters = self._drain()
        self._state = RefreshState.IDLE

        logger.error(
            "Credential refresh failed",
            extra={
                "reason": error.reason,
                "http_status": error.status_code,
                "waiters_flushed": len(waiters),
                "duration_ms": round(duration * 1000, 2),
            },
        )

        try:
            await self.terminator.terminate(error.reason)
        finally:
            for waiter in waiters:
                waiter.reject(error)

    def _fail_waiters(self, error: RefreshFailedError) -> None:
        waiters = self._drain()
        self._state = RefreshState.IDLE
        for waiter in waiters:
            waiter.reject(error)

    def _drain(self) -> List[PendingWaiter]:
        waiters, self._waiters = self._waiters, []
        return waiters

    def reset(self) -> None:
        """Cancel any in-flight refresh and return to IDLE."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._fail_waiters(
            RefreshFailedError("Refresh coordinator reset", reason="reset")
        )
        self._task = None


__all__ = [
    "DEFAULT_REFRESH_TIMEOUT_SECONDS",
    "PendingWaiter",
    "RefreshCall",
    "RefreshCoordinator",
    "RefreshOutcome",
    "RefreshState",
]
