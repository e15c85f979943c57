from datetime import datetime
from typing import Self
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


class RegisterUserRequest(BaseModel):
    """
    Registration data.

    :cvar str username: Login name, 3-100 letters, digits, "_" or "-".
    :cvar EmailStr email: Email address.
    :cvar str password: Password.
    :cvar str first_name: First name.
    :cvar str last_name: Last name.
    """

    username: str = Field(min_length=3, max_length=100, pattern=r"^[a-zA-Z0-9_-]+$")
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class UserResponse(BaseModel):
    """
    Public user data.

    :cvar uuid.UUID id: User ID.
    :cvar str username: Login name.
    :cvar str email: Email address.
    :cvar str first_name: First name.
    :cvar str last_name: Last name.
    :cvar str full_name: First and last name.
    :cvar bool is_active: Whether the account is active.
    """

    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UpdateProfileRequest(BaseModel):
    """
    Partial profile update; omitted fields stay unchanged.

    :cvar str | None first_name: New first name.
    :cvar str | None last_name: New last name.
    :cvar EmailStr | None email: New email.
    """

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None


class ChangePasswordRequest(BaseModel):
    """
    Password change.

    :cvar str current_password: Current password.
    :cvar str new_password: New password.
    :cvar str confirm_password: New password again.
    """

    current_password: str
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    confirm_password: str

    @model_validator(mode="after")
    def check_passwords_match(self) -> Self:
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class AvailabilityResponse(BaseModel):
    """
    :cvar bool available: Whether the username or email can be registered.
    """

    available: bool
