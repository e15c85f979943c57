from datetime import datetime
from typing import Any
import uuid

from pydantic import BaseModel, ConfigDict, Field


class AccessToken(BaseModel):
    """
    Issued access token.

    :cvar str access_token: Access token.
    :cvar str token_type: Token type, always "bearer".
    """

    access_token: str
    token_type: str = "bearer"  # noqa: S105


class TokenPair(AccessToken):
    """
    Access and refresh tokens issued on login.

    :cvar str access_token: Access token.
    :cvar str refresh_token: Refresh token.
    :cvar str token_type: Token type, always "bearer".
    """

    refresh_token: str


class TokenClaims(BaseModel):
    """
    Claims recovered from a validated token.

    :cvar uuid.UUID user_id: Token owner.
    :cvar str username: Owner's username at issue time.
    :cvar str email: Owner's email at issue time.
    :cvar datetime issued_at: Issue time.
    :cvar datetime expires_at: Expiry time.
    :cvar dict custom_claims: Claims beyond the standard ones, e.g. token_type.
    """

    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    username: str
    email: str
    issued_at: datetime
    expires_at: datetime
    custom_claims: dict[str, Any] = Field(default_factory=dict)


class RefreshTokenRequest(BaseModel):
    """
    Request for a new access token.

    :cvar str refresh_token: Refresh token.
    """

    refresh_token: str
