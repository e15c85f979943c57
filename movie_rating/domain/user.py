from datetime import UTC, datetime
import re
from typing import Self
import uuid

from pydantic import Field, field_validator

from movie_rating.domain.entity import DomainEntity
from movie_rating.domain.lifecycle import ACTIVE, Active, Inactive, Lifecycle

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 100
NAME_MAX_LENGTH = 100

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9]([a-zA-Z0-9._+%-]*[a-zA-Z0-9])?@([a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}$")


def is_valid_email(email: str) -> bool:
    """
    Checks an email against the accepted format.

    Consecutive dots are rejected and the domain must contain a dot.

    :param email: Email to check.
    :return: Whether the email is acceptable.
    :rtype: bool
    """
    if ".." in email:
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


class User(DomainEntity):
    """
    Registered account.

    :cvar uuid.UUID id: User ID.
    :cvar str username: Unique login name.
    :cvar str email: Unique email, stored lowercase.
    :cvar str password_hash: Opaque password hash.
    :cvar str first_name: First name.
    :cvar str last_name: Last name.
    :cvar Lifecycle lifecycle: Active or deactivated state.
    :cvar datetime created_at: Creation time.
    :cvar datetime updated_at: Last modification time.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    username: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    lifecycle: Lifecycle = ACTIVE
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Username cannot be empty")
        if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
            raise ValueError(
                f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
            )
        if not USERNAME_PATTERN.fullmatch(value):
            raise ValueError("Username can only contain letters, numbers, underscores, and hyphens")
        return value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Email cannot be empty")
        normalized = value.strip().lower()
        if not is_valid_email(normalized):
            raise ValueError(f"Invalid email format: {value}")
        return normalized

    @field_validator("password_hash")
    @classmethod
    def validate_password_hash(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Password hash cannot be empty")
        return value

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Name cannot be empty")
        if len(value) > NAME_MAX_LENGTH:
            raise ValueError(f"Name cannot exceed {NAME_MAX_LENGTH} characters")
        return value

    @property
    def is_active(self) -> bool:
        return isinstance(self.lifecycle, Active)

    @property
    def deactivated_at(self) -> datetime | None:
        return self.lifecycle.at if isinstance(self.lifecycle, Inactive) else None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def deactivate(self) -> Self:
        """Returns a deactivated copy; an inactive user is returned as is."""
        if not self.is_active:
            return self
        now = datetime.now(UTC)
        return self.evolve(lifecycle=Inactive(at=now), updated_at=now)

    def reactivate(self) -> Self:
        """Returns an active copy; an active user is returned as is."""
        if self.is_active:
            return self
        return self.evolve(lifecycle=ACTIVE, updated_at=datetime.now(UTC))

    def update_profile(
        self, first_name: str | None = None, last_name: str | None = None, email: str | None = None
    ) -> Self:
        """
        Applies a partial profile update. None leaves a field unchanged.

        :param first_name: New first name.
        :param last_name: New last name.
        :param email: New email.
        :return: Updated user.
        :rtype: User
        :raises ValidationException: If a new value breaks a rule.
        """
        changes: dict = {"updated_at": datetime.now(UTC)}
        if first_name is not None:
            changes["first_name"] = first_name
        if last_name is not None:
            changes["last_name"] = last_name
        if email is not None:
            changes["email"] = email
        return self.evolve(**changes)

    def change_email(self, email: str) -> Self:
        return self.evolve(email=email, updated_at=datetime.now(UTC))

    def change_password(self, password_hash: str) -> Self:
        return self.evolve(password_hash=password_hash, updated_at=datetime.now(UTC))
