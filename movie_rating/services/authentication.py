from datetime import UTC, datetime
import logging
import uuid

from movie_rating.domain.commands import AuthenticationCommand
from movie_rating.domain.ports import PasswordHashing, UserRepository
from movie_rating.domain.user import User
from movie_rating.exceptions.auth import AuthenticationFailedException
from movie_rating.exceptions.user import UserAccountInactiveException, UserNotFoundException

logger = logging.getLogger(__name__)


class UserAuthenticationService:
    """Checks credentials against stored users."""

    def __init__(self, user_repository: UserRepository, password_hashing: PasswordHashing) -> None:
        self.user_repository = user_repository
        self.password_hashing = password_hashing

    async def _find_user(self, command: AuthenticationCommand) -> User | None:
        login = command.username_or_email.strip()
        if command.is_email:
            return await self.user_repository.find_by_email(login.lower())
        return await self.user_repository.find_by_username(login)

    async def authenticate(self, command: AuthenticationCommand) -> User:
        """
        Authenticates a user by username or email and password.

        :param command: Login and password.
        :return: Authenticated user.
        :rtype: User
        :raises UserNotFoundException: If no user matches the login.
        :raises UserAccountInactiveException: If the account is deactivated.
        :raises AuthenticationFailedException: If the password is wrong.
        """
        user = await self._find_user(command)
        if user is None:
            logger.warning("Authentication failed, unknown user")
            raise UserNotFoundException
        # Inactive accounts are rejected before the password is checked
        if not user.is_active:
            logger.warning("Authentication rejected, user %s is inactive", user.id)
            raise UserAccountInactiveException
        if not self.password_hashing.verify_password(command.password, user.password_hash):
            logger.warning("Authentication failed for user %s", user.id)
            raise AuthenticationFailedException

        logger.info("User %s authenticated", user.id)
        return user

    async def validate_credentials(self, username_or_email: str, password: str) -> bool:
        """
        Boolean form of authenticate: every failure gives False.

        :param username_or_email: Login.
        :param password: Password.
        :return: Whether the credentials are valid.
        :rtype: bool
        """
        try:
            await self.authenticate(AuthenticationCommand(username_or_email=username_or_email, password=password))
        except Exception:
            logger.debug("Credential check failed", exc_info=True)
            return False
        return True

    async def update_last_login(self, user_id: uuid.UUID) -> User:
        """
        Touches updated_at of the user. Applies to inactive users as well.

        :param user_id: User ID.
        :return: Updated user.
        :rtype: User
        :raises UserNotFoundException: If the user does not exist.
        """
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise UserNotFoundException
        return await self.user_repository.save(user.evolve(updated_at=datetime.now(UTC)))
