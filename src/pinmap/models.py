"""
Backend payload schemas.

Pydantic models for the JSON bodies exchanged with the bookmarking backend.
Field names follow the backend's camelCase via aliases; Python code uses the
snake_case attribute names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiEnvelope(BaseModel):
    """Standard response wrapper returned by every backend endpoint.

    Example:
        >>> envelope = ApiEnvelope.model_validate({"success": True, "data": [1, 2]})
        >>> envelope.data
        [1, 2]
    """

    model_config = ConfigDict(extra="ignore")

    success: bool = Field(default=True, description="Whether the call succeeded")
    data: Any = Field(default=None, description="Endpoint-specific payload")
    message: str | None = Field(default=None, description="Human-readable message")
    error: str | None = Field(default=None, description="Error code or description")

    @classmethod
    def from_body(cls, body: Any) -> "ApiEnvelope":
        """Wrap a decoded body, tolerating endpoints that return bare payloads."""
        if isinstance(body, dict) and "success" in body:
            return cls.model_validate(body)
        return cls(success=True, data=body)


class RefreshTokenResponse(BaseModel):
    """Body of a successful POST /api/v1/auth/token/refresh."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(..., alias="accessToken", min_length=1)

    @field_validator("access_token")
    @classmethod
    def validate_non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("accessToken cannot be blank")
        return v


class User(BaseModel):
    """Signed-in user profile.

    Attributes:
        id: Backend user id (JWT `sub`)
        email: Account email
        name: Display name
        profile_image_url: Avatar URL, if the provider supplied one
        provider: Identity provider that issued the session
        created_at: ISO-8601 creation timestamp
        updated_at: ISO-8601 update timestamp
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    email: str = ""
    name: str = ""
    profile_image_url: str | None = Field(default=None, alias="profileImageUrl")
    provider: str = "Google"
    created_at: str = Field(default="", alias="createdAt")
    updated_at: str = Field(default="", alias="updatedAt")


__all__ = ["ApiEnvelope", "RefreshTokenResponse", "User"]
