"""Replays a request once after its credential has been refreshed."""

import logging
from typing import Awaitable, Callable

from core.http.models import ApiRequest, ApiResponse

logger = logging.getLogger(__name__)

SendFunc = Callable[[ApiRequest], Awaitable[ApiResponse]]


class RetryDispatcher:
    """
    Re-issues a request through the normal pipeline entry point.

    Going back through the entry point means the interceptor runs again and
    attaches the new credential. The retry marker already on the request
    stops a second refresh if the replay also gets a 401.
    """

    def __init__(self, send: SendFunc):
        self._send = send

    async def replay(self, request: ApiRequest) -> ApiResponse:
        if not request.retried:
            raise RuntimeError(
                f"Refusing to replay request {request.request_id}: not marked retried"
            )

        logger.debug(
            "Replaying request with refreshed credential",
            extra={
                "request_id": request.request_id,
                "api_method": request.method,
                "api_endpoint": request.path,
            },
        )
        return await self._send(request)


__all__ = ["RetryDispatcher", "SendFunc"]
