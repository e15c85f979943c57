from datetime import UTC, datetime, timedelta
import hashlib
import logging
from typing import Any
import uuid

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from movie_rating.core.config import settings
from movie_rating.domain.jwt_token import JwtToken, TokenType
from movie_rating.domain.ports import JwtTokenRepository
from movie_rating.exceptions.auth import InvalidTokenException
from movie_rating.schemas.token import TokenClaims

logger = logging.getLogger(__name__)

SUB = "sub"
ISS = "iss"
EXP = "exp"
IAT = "iat"
JTI = "jti"
USER_ID = "user_id"
USERNAME = "username"
EMAIL = "email"
TOKEN_TYPE = "token_type"
REFRESH = "refresh"

RESERVED_CLAIMS = frozenset({SUB, ISS, EXP, IAT, JTI, USER_ID, USERNAME, EMAIL})


def hash_token(token: str | None) -> str:
    """
    Stable one-way hash used to look tokens up without storing them.

    :param token: Raw token; None hashes like an empty string.
    :return: SHA-256 hex digest.
    :rtype: str
    """
    return hashlib.sha256((token or "").encode("utf-8")).hexdigest()


class JwtTokenService:
    """
    Issues and checks signed session tokens.

    Every issued token is recorded by hash so it can be revoked before expiry.
    """

    def __init__(
        self,
        token_repository: JwtTokenRepository,
        secret_key: str | None = None,
        algorithm: str | None = None,
        issuer: str | None = None,
    ) -> None:
        self.token_repository = token_repository
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM
        self.issuer = issuer or settings.JWT_ISSUER

    async def generate_token(
        self,
        user_id: uuid.UUID,
        username: str,
        email: str,
        expires_delta: timedelta,
        custom_claims: dict[str, Any] | None = None,
    ) -> str:
        """
        Signs a token and records it.

        :param user_id: Token owner.
        :param username: Owner's username.
        :param email: Owner's email.
        :param expires_delta: Token lifetime.
        :param custom_claims: Extra claims; token_type="refresh" marks a refresh token.
        :return: Encoded token.
        :rtype: str
        """
        custom_claims = custom_claims or {}
        issued_at = datetime.now(UTC)
        expires_at = issued_at + expires_delta

        payload: dict[str, Any] = {key: value for key, value in custom_claims.items() if key not in RESERVED_CLAIMS}
        payload.update(
            {
                SUB: str(user_id),
                ISS: self.issuer,
                IAT: issued_at,
                EXP: expires_at,
                JTI: str(uuid.uuid4()),
                USER_ID: str(user_id),
                USERNAME: username,
                EMAIL: email,
            }
        )
        token = jwt.encode(payload=payload, key=self.secret_key, algorithm=self.algorithm)

        token_type = TokenType.REFRESH if custom_claims.get(TOKEN_TYPE) == REFRESH else TokenType.ACCESS
        await self.token_repository.save(
            JwtToken(
                user_id=user_id,
                token_hash=self.hash_token(token),
                token_type=token_type,
                issued_at=issued_at,
                expires_at=expires_at,
            )
        )
        logger.debug("Issued %s token for user %s", token_type.value, username)
        return token

    def _decode(self, token: str, verify_exp: bool = True) -> dict[str, Any]:
        return jwt.decode(
            token,
            self.secret_key,
            algorithms=[self.algorithm],
            issuer=self.issuer,
            options={"require": [SUB, EXP, IAT], "verify_exp": verify_exp},
        )

    def validate_token(self, token: str) -> TokenClaims:
        """
        Checks the signature and expiry and extracts the claims.

        :param token: Encoded token.
        :return: Claims of the token.
        :rtype: TokenClaims
        :raises InvalidTokenException: If the token is expired, malformed or badly signed.
        """
        try:
            payload = self._decode(token)
            claims = TokenClaims(
                user_id=uuid.UUID(str(payload[USER_ID])),
                username=payload[USERNAME],
                email=payload[EMAIL],
                issued_at=datetime.fromtimestamp(payload[IAT], tz=UTC),
                expires_at=datetime.fromtimestamp(payload[EXP], tz=UTC),
                custom_claims={key: value for key, value in payload.items() if key not in RESERVED_CLAIMS},
            )
        except ExpiredSignatureError as e:
            logger.warning("Rejected expired token")
            raise InvalidTokenException(detail="Token has expired") from e
        except (InvalidTokenError, KeyError, ValueError) as e:
            logger.warning("Rejected invalid token: %s", e)
            raise InvalidTokenException(detail="Invalid token") from e
        return claims

    async def validate_token_with_blacklist(self, token: str) -> TokenClaims:
        """
        Same as validate_token, but also rejects revoked tokens.

        :param token: Encoded token.
        :return: Claims of the token.
        :rtype: TokenClaims
        :raises InvalidTokenException: If the token is revoked or invalid.
        """
        if await self.token_repository.is_token_revoked(self.hash_token(token)):
            logger.warning("Rejected revoked token")
            raise InvalidTokenException(detail="Token has been revoked")
        return self.validate_token(token)

    def extract_user_id(self, token: str) -> uuid.UUID:
        try:
            return uuid.UUID(str(self._decode(token)[USER_ID]))
        except (InvalidTokenError, KeyError, ValueError) as e:
            raise InvalidTokenException(detail="Cannot extract user ID from token") from e

    def is_token_expired(self, token: str) -> bool:
        """
        :param token: Encoded token.
        :return: Whether the token is past its expiry.
        :rtype: bool
        :raises InvalidTokenException: If the token cannot be read at all.
        """
        try:
            payload = self._decode(token, verify_exp=False)
        except InvalidTokenError as e:
            raise InvalidTokenException(detail="Cannot check token expiry") from e
        return datetime.fromtimestamp(payload[EXP], tz=UTC) <= datetime.now(UTC)

    async def refresh_token(self, token: str, expires_delta: timedelta) -> str:
        """
        Revokes the token and issues a new one with the same claims.

        :param token: Valid encoded token.
        :param expires_delta: Lifetime of the new token.
        :return: New encoded token.
        :rtype: str
        :raises InvalidTokenException: If the old token is invalid.
        """
        claims = self.validate_token(token)
        await self.blacklist_token(token, reason="Token refreshed")
        return await self.generate_token(
            user_id=claims.user_id,
            username=claims.username,
            email=claims.email,
            expires_delta=expires_delta,
            custom_claims=claims.custom_claims,
        )

    async def blacklist_token(self, token: str, reason: str) -> None:
        revoked = await self.token_repository.revoke_by_token_hash(self.hash_token(token), reason)
        logger.debug("Revoked %s token record(s): %s", revoked, reason)

    @staticmethod
    def hash_token(token: str | None) -> str:
        return hash_token(token)

    async def revoke_all_for_user(self, user_id: uuid.UUID, reason: str) -> int:
        """
        Revokes every outstanding token of the user.

        :param user_id: Token owner.
        :param reason: Stored revocation reason.
        :return: Number of revoked records.
        :rtype: int
        """
        revoked = await self.token_repository.revoke_all_tokens_for_user(user_id, reason)
        logger.info("Revoked %s token(s) of user %s: %s", revoked, user_id, reason)
        return revoked
