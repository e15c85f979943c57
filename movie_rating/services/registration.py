import asyncio
import logging

from sqlalchemy.exc import IntegrityError

from movie_rating.domain.commands import RegisterUserCommand
from movie_rating.domain.ports import PasswordHashing, UserRepository
from movie_rating.domain.user import User
from movie_rating.exceptions.base import AppHTTPException
from movie_rating.exceptions.user import (
    EmailAlreadyExistsException,
    UserCreationException,
    UsernameAlreadyExistsException,
)

logger = logging.getLogger(__name__)


def _conflict_from(error: IntegrityError, username: str, email: str) -> AppHTTPException:
    """
    Names the unique constraint a failed insert ran into.

    Only the first line of the driver message is read, the detail lines echo user values.

    :param error: Error raised by the insert.
    :param username: Normalized username of the new user.
    :param email: Normalized email of the new user.
    :return: Conflict exception to raise instead.
    :rtype: AppHTTPException
    """
    reason = next(iter(str(error.orig).splitlines()), "")
    if "uq_users_username" in reason or "users.username" in reason:
        logger.warning("Registration lost a race, username %s was taken", username)
        return UsernameAlreadyExistsException(username)
    if "uq_users_email" in reason or "users.email" in reason:
        logger.warning("Registration lost a race, email %s was taken", email)
        return EmailAlreadyExistsException(email)
    return UserCreationException()


class RegisterUserService:
    """Creates accounts with unique usernames and emails."""

    def __init__(self, user_repository: UserRepository, password_hashing: PasswordHashing) -> None:
        self.user_repository = user_repository
        self.password_hashing = password_hashing

    async def register_user(self, command: RegisterUserCommand) -> User:
        """
        Registers a new active user.

        The username and email checks run concurrently.

        :param command: Registration data.
        :return: Created user.
        :rtype: User
        :raises UsernameAlreadyExistsException: If the username is taken.
        :raises EmailAlreadyExistsException: If the email is taken.
        :raises ValidationException: If the data breaks the user rules.
        :raises UserCreationException: If the row could not be written.
        """
        username = command.username.strip()
        email = command.email.strip().lower()

        username_taken, email_taken = await asyncio.gather(
            self.user_repository.exists_by_username(username),
            self.user_repository.exists_by_email(email),
        )
        if username_taken:
            logger.warning("Registration rejected, username %s is taken", username)
            raise UsernameAlreadyExistsException(username)
        if email_taken:
            logger.warning("Registration rejected, email %s is taken", email)
            raise EmailAlreadyExistsException(email)

        user = User.build(
            username=username,
            email=email,
            password_hash=self.password_hashing.hash_password(command.password),
            first_name=command.first_name.strip(),
            last_name=command.last_name.strip(),
        )
        try:
            saved = await self.user_repository.save(user)
        except IntegrityError as e:
            raise _conflict_from(e, username, email) from e

        logger.info("Registered user %s (%s)", saved.username, saved.id)
        return saved

    async def is_username_available(self, username: str | None) -> bool:
        if username is None or not username.strip():
            return False
        return not await self.user_repository.exists_by_username(username.strip())

    async def is_email_available(self, email: str | None) -> bool:
        if email is None or not email.strip():
            return False
        return not await self.user_repository.exists_by_email(email.strip().lower())
