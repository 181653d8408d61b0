"""
Sign-in state and auth endpoints for the bookmarking backend.

AuthSession is the client-side view of who is signed in. It listens to the
session terminator, so a failed refresh anywhere in the client flips it to
signed-out without the caller having to catch anything.
"""

import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.errors.exceptions import (
    ApiError,
    AuthExpiredError,
    TransportError,
)
from core.logging.context_managers import log_phase
from pinmap.api_client import PinmapApiClient
from pinmap.endpoints import LOGOUT_PATH, USER_PROFILE_PATH
from pinmap.models import User

logger = logging.getLogger(__name__)

LOGOUT_REASON = "logout"


def decode_jwt_payload(token: str) -> Dict[str, Any]:
    """Decode the payload segment of a JWT without verifying it.

    The backend verifies the signature on every call; the client only reads
    the claims to show who is signed in.

    Raises:
        ValueError: token is not a three-part JWT with a JSON payload
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("Invalid JWT token format")

    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ValueError("Invalid JWT token format") from e

    if not isinstance(payload, dict):
        raise ValueError("Invalid JWT token format")
    return payload


def user_from_claims(claims: Dict[str, Any]) -> User:
    now = datetime.now(timezone.utc).isoformat()
    return User(
        id=str(claims.get("sub") or claims.get("user_id") or ""),
        email=claims.get("email") or "",
        name=claims.get("name") or claims.get("given_name") or "",
        profile_image_url=claims.get("picture") or None,
        provider="Google",
        created_at=now,
        updated_at=now,
    )


class AuthSession:
    """Signed-in user and authentication state."""

    def __init__(self):
        self.user: Optional[User] = None
        self.is_authenticated = False
        self.error: Optional[str] = None

    def sign_in(self, user: User) -> None:
        self.user = user
        self.is_authenticated = True
        self.error = None

    def on_terminated(self, reason: str) -> None:
        """SessionTerminator listener."""
        self.user = None
        self.is_authenticated = False
        self.error = None if reason == LOGOUT_REASON else reason
        logger.info(
            "Signed out",
            extra={"reason": reason},
        )


class AuthService:
    """
    Auth operations on top of PinmapApiClient.

    Usage:
        async with PinmapApiClient(config) as client:
            auth = AuthService(client)
            user = auth.login_with_token(token_from_redirect)
            profile = await auth.get_user_profile()
            await auth.logout()
    """

    def __init__(self, client: PinmapApiClient, session: Optional[AuthSession] = None):
        self.client = client
        self.session = session or AuthSession()
        self.client.terminator.add_listener(self.session.on_terminated)

    def login_with_token(self, token: str) -> User:
        """Adopt an access credential issued by the backend after sign-in.

        Raises:
            ValueError: token is not a decodable JWT
        """
        try:
            claims = decode_jwt_payload(token)
        except ValueError:
            logger.error("Failed to decode access credential")
            raise

        user = user_from_claims(claims)
        self.client.credentials.set(token)
        self.client.terminator.rearm()
        self.session.sign_in(user)

        logger.info("User signed in from token", extra={"user_id": user.id})
        return user

    async def get_user_profile(self) -> User:
        try:
            with log_phase(logger, "get_user_profile"):
                envelope = await self.client.get(USER_PROFILE_PATH)
        except TransportError as e:
            logger.error(
                "Failed to get user profile",
                extra={"error_message": str(e)[:200]},
            )
            raise TransportError(
                "Backend server is not available. Please check if the server is running.",
                cause=e,
                context=e.context,
            ) from e

        if not envelope.success or not envelope.data:
            raise ApiError(envelope.message or "Failed to get user profile")

        user = User.model_validate(envelope.data)
        self.session.sign_in(user)
        return user

    async def refresh_access_token(self) -> str:
        """Refresh now, joining any refresh already in flight.

        Raises:
            RefreshFailedError: the session could not be refreshed and has
                been terminated
        """
        return await self.client.coordinator.refresh()

    async def logout(self) -> None:
        """Sign out on the server, then always clear local state."""
        try:
            await self.client.post(LOGOUT_PATH)
            logger.info("Server logout succeeded")
        except AuthExpiredError:
            logger.info("Already unauthenticated, skipping server logout")
        except ApiError as e:
            logger.error(
                "Logout request failed",
                extra={
                    "http_status": e.status_code,
                    "error_category": e.category.value,
                    "error_message": str(e)[:200],
                },
            )
        finally:
            await self.client.terminator.terminate(LOGOUT_REASON)


__all__ = [
    "AuthService",
    "AuthSession",
    "LOGOUT_REASON",
    "decode_jwt_payload",
    "user_from_claims",
]
