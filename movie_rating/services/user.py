import logging
import uuid

from sqlalchemy.exc import IntegrityError

from movie_rating.domain.commands import ChangePasswordCommand, UpdateUserProfileCommand
from movie_rating.domain.ports import PasswordHashing, UserRepository
from movie_rating.domain.user import User
from movie_rating.exceptions.auth import InvalidPasswordException
from movie_rating.exceptions.user import (
    EmailAlreadyExistsException,
    UserAccountInactiveException,
    UserNotFoundException,
)

logger = logging.getLogger(__name__)


class ManageUserProfileService:
    """Profile reads and changes of existing users."""

    def __init__(self, user_repository: UserRepository, password_hashing: PasswordHashing) -> None:
        self.user_repository = user_repository
        self.password_hashing = password_hashing

    async def get_user_profile(self, user_id: uuid.UUID) -> User:
        """
        :param user_id: User ID.
        :return: The user.
        :rtype: User
        :raises UserNotFoundException: If the user does not exist.
        """
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise UserNotFoundException
        return user

    async def update_user_profile(self, command: UpdateUserProfileCommand) -> User:
        """
        Partially updates names and email.

        Email uniqueness is checked only when the email actually changes.

        :param command: Fields to change.
        :return: Updated user.
        :rtype: User
        :raises UserNotFoundException: If the user does not exist.
        :raises EmailAlreadyExistsException: If the new email is taken.
        :raises ValidationException: If a new value breaks the user rules.
        """
        user = await self.get_user_profile(command.user_id)

        new_email = command.email.strip().lower() if command.email is not None else None
        if new_email is not None and new_email != user.email.lower():
            if await self.user_repository.exists_by_email(new_email):
                logger.warning("Profile update of %s rejected, email %s is taken", user.id, new_email)
                raise EmailAlreadyExistsException(new_email)

        updated = user.update_profile(
            first_name=command.first_name.strip() if command.first_name is not None else None,
            last_name=command.last_name.strip() if command.last_name is not None else None,
            email=new_email,
        )
        try:
            saved = await self.user_repository.update(updated)
        except IntegrityError as e:
            raise EmailAlreadyExistsException(updated.email) from e

        logger.info("Updated profile of user %s", saved.id)
        return saved

    async def change_password(self, command: ChangePasswordCommand) -> User:
        """
        :param command: Current and new password.
        :return: Updated user.
        :rtype: User
        :raises UserNotFoundException: If the user does not exist.
        :raises UserAccountInactiveException: If the account is deactivated.
        :raises InvalidPasswordException: If the current password is wrong.
        """
        user = await self.get_user_profile(command.user_id)
        if not user.is_active:
            raise UserAccountInactiveException
        if not self.password_hashing.verify_password(command.current_password, user.password_hash):
            logger.warning("Password change of user %s rejected, wrong current password", user.id)
            raise InvalidPasswordException

        saved = await self.user_repository.update(
            user.change_password(self.password_hashing.hash_password(command.new_password))
        )
        logger.info("Changed password of user %s", saved.id)
        return saved

    async def deactivate_user(self, user_id: uuid.UUID) -> User:
        user = await self.get_user_profile(user_id)
        if not user.is_active:
            logger.warning("User %s is already inactive", user_id)
            return user
        saved = await self.user_repository.update(user.deactivate())
        logger.info("Deactivated user %s", user_id)
        return saved

    async def reactivate_user(self, user_id: uuid.UUID) -> User:
        user = await self.get_user_profile(user_id)
        if user.is_active:
            logger.warning("User %s is already active", user_id)
            return user
        saved = await self.user_repository.update(user.reactivate())
        logger.info("Reactivated user %s", user_id)
        return saved

    async def get_all_active_users(self) -> list[User]:
        return await self.user_repository.find_all_active()

    async def search_users_by_username(self, pattern: str | None) -> list[User]:
        """
        :param pattern: Username substring; blank returns every active user.
        :return: Matching users.
        :rtype: list[User]
        """
        if pattern is None or not pattern.strip():
            return await self.get_all_active_users()
        return await self.user_repository.search_by_username_pattern(pattern.strip())
