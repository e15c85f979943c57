from datetime import UTC, datetime
from enum import Enum
from typing import Self
import uuid

from pydantic import Field, model_validator

from movie_rating.domain.entity import DomainEntity


class TokenType(str, Enum):
    """
    Kind of issued token.

    :cvar str ACCESS: Short-lived token for API calls.
    :cvar str REFRESH: Long-lived token for getting new access tokens.
    """

    ACCESS = "ACCESS"
    REFRESH = "REFRESH"


class JwtToken(DomainEntity):
    """
    Record of an issued token, keyed by the token's hash.

    :cvar uuid.UUID id: Record ID.
    :cvar uuid.UUID user_id: Owner of the token.
    :cvar str token_hash: SHA-256 hex digest of the token.
    :cvar TokenType token_type: ACCESS or REFRESH.
    :cvar datetime issued_at: Issue time.
    :cvar datetime expires_at: Expiry time.
    :cvar bool is_revoked: Whether the token was revoked.
    :cvar datetime | None revoked_at: Revocation time.
    :cvar str | None revoked_reason: Why the token was revoked.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    user_id: uuid.UUID
    token_hash: str = Field(min_length=1)
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    is_revoked: bool = False
    revoked_at: datetime | None = None
    revoked_reason: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def check_expiry_after_issue(self) -> Self:
        if self.issued_at > self.expires_at:
            raise ValueError("Token cannot expire before it is issued")
        return self

    def is_expired(self) -> bool:
        return datetime.now(UTC) >= self.expires_at

    def is_valid(self) -> bool:
        return not self.is_revoked and not self.is_expired()

    def seconds_until_expiration(self) -> int:
        """Seconds left before expiry, zero once expired."""
        return max(0, int((self.expires_at - datetime.now(UTC)).total_seconds()))

    def revoke(self, reason: str) -> Self:
        if self.is_revoked:
            return self
        now = datetime.now(UTC)
        return self.evolve(is_revoked=True, revoked_at=now, revoked_reason=reason, updated_at=now)
