from datetime import timedelta
import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from movie_rating.core.config import settings
from movie_rating.domain.commands import AuthenticationCommand
from movie_rating.domain.ports import UserRepository
from movie_rating.domain.user import User
from movie_rating.exceptions.auth import AuthenticationFailedException, InvalidTokenException
from movie_rating.exceptions.user import UserAccountInactiveException, UserNotFoundException
from movie_rating.schemas.success_msg import SuccessResponse
from movie_rating.schemas.token import AccessToken, TokenClaims, TokenPair
from movie_rating.services.authentication import UserAuthenticationService
from movie_rating.services.dependencies import (
    authentication_service_ann,
    token_service_ann,
    user_repository_ann,
)
from movie_rating.services.security.jwt import REFRESH, TOKEN_TYPE, JwtTokenService

logger = logging.getLogger(__name__)

ACCESS = "access"
LOGOUT_REASON = "User logout"


def access_token_ttl() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def refresh_token_ttl() -> timedelta:
    return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


class AuthService:
    """Login, refresh and logout on top of authentication and token issuing."""

    def __init__(
        self,
        authentication: UserAuthenticationService,
        token_service: JwtTokenService,
        user_repository: UserRepository,
    ) -> None:
        self.authentication = authentication
        self.token_service = token_service
        self.user_repository = user_repository

    async def _issue(self, user: User, token_type: str, ttl: timedelta) -> str:
        return await self.token_service.generate_token(
            user_id=user.id,
            username=user.username,
            email=user.email,
            expires_delta=ttl,
            custom_claims={TOKEN_TYPE: token_type},
        )

    async def login(self, username_or_email: str, password: str) -> TokenPair:
        """
        Authenticates the user and issues an access and a refresh token.

        :param username_or_email: Username, or email if it contains "@".
        :param password: Password.
        :return: Access and refresh tokens.
        :rtype: TokenPair
        :raises AuthenticationFailedException: If the credentials are wrong or the user is unknown.
        :raises UserAccountInactiveException: If the account is deactivated.
        """
        try:
            command = AuthenticationCommand(username_or_email=username_or_email, password=password)
            user = await self.authentication.authenticate(command)
        except (ValidationError, UserNotFoundException) as e:
            raise AuthenticationFailedException from e

        access_token = await self._issue(user, ACCESS, access_token_ttl())
        refresh_token = await self._issue(user, REFRESH, refresh_token_ttl())
        await self.authentication.update_last_login(user.id)

        logger.info("User %s logged in", user.id)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def refresh(self, refresh_token: str) -> AccessToken:
        """
        Issues a new access token for a valid refresh token.

        :param refresh_token: Refresh token.
        :return: New access token.
        :rtype: AccessToken
        :raises InvalidTokenException: If the token is invalid, revoked or not a refresh token.
        :raises UserNotFoundException: If the owner no longer exists.
        :raises UserAccountInactiveException: If the owner is deactivated.
        """
        claims = await self.token_service.validate_token_with_blacklist(refresh_token)
        if claims.custom_claims.get(TOKEN_TYPE) != REFRESH:
            raise InvalidTokenException(detail="Token is not a refresh token")

        user = await self.user_repository.find_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundException
        if not user.is_active:
            raise UserAccountInactiveException

        return AccessToken(access_token=await self._issue(user, ACCESS, access_token_ttl()))

    async def logout(self, access_token: str, refresh_token: str | None = None) -> SuccessResponse:
        """
        Revokes the given tokens. Unknown tokens are ignored.

        :param access_token: Bearer token of the request.
        :param refresh_token: Refresh token to revoke as well.
        :return: Success message.
        :rtype: SuccessResponse
        """
        await self.token_service.blacklist_token(access_token, reason=LOGOUT_REASON)
        if refresh_token:
            await self.token_service.blacklist_token(refresh_token, reason=LOGOUT_REASON)
        return SuccessResponse(msg="Logged out successfully")


def get_auth_service(
    authentication: authentication_service_ann,
    token_service: token_service_ann,
    user_repository: user_repository_ann,
) -> AuthService:
    return AuthService(authentication, token_service, user_repository)


auth_service_ann = Annotated[AuthService, Depends(get_auth_service)]

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", refreshUrl="/api/v1/auth/refresh")
oauth2_ann = Annotated[str, Depends(oauth2_scheme)]


async def get_current_user(access_token: oauth2_ann, token_service: token_service_ann) -> TokenClaims:
    """
    Dependency resolving the caller from the bearer token.

    :param access_token: Access token from the Authorization header.
    :param token_service: Token service.
    :return: Claims of the caller's token.
    :rtype: TokenClaims
    :raises InvalidTokenException: If the token is invalid, revoked or a refresh token.
    """
    claims = await token_service.validate_token_with_blacklist(access_token)
    if claims.custom_claims.get(TOKEN_TYPE) == REFRESH:
        raise InvalidTokenException(detail="Refresh token cannot be used for access")
    return claims


get_current_user_ann = Annotated[TokenClaims, Depends(get_current_user)]
