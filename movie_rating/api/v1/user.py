from typing import Annotated
import uuid

from fastapi import APIRouter, Query
from starlette import status

from movie_rating.api.openapi import generate_responses
from movie_rating.domain.commands import ChangePasswordCommand, UpdateUserProfileCommand
from movie_rating.exceptions.auth import InvalidPasswordException, InvalidTokenException
from movie_rating.exceptions.user import (
    EmailAlreadyExistsException,
    UserAccountInactiveException,
    UserNotFoundException,
)
from movie_rating.exceptions.validation import ValidationException
from movie_rating.schemas.success_msg import SuccessResponse
from movie_rating.schemas.user import ChangePasswordRequest, UpdateProfileRequest, UserResponse
from movie_rating.services.auth import get_current_user_ann
from movie_rating.services.dependencies import token_service_ann, user_profile_service_ann

router = APIRouter(prefix="/users", tags=["users"])

DEACTIVATION_REASON = "Account deactivated"


@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    response_model=UserResponse,
    summary="Get info about current user",
    responses=generate_responses(InvalidTokenException, UserNotFoundException),
)
async def read_user_me(current_user: get_current_user_ann, profiles: user_profile_service_ann) -> UserResponse:
    """
    :param current_user: Claims of the caller.
    :param profiles: Profile service.
    :return: Data of the current user.
    :rtype: UserResponse
    """
    return UserResponse.model_validate(await profiles.get_user_profile(current_user.user_id))


@router.patch(
    "/me",
    status_code=status.HTTP_200_OK,
    response_model=UserResponse,
    summary="Update names or email of current user",
    responses=generate_responses(UserNotFoundException, EmailAlreadyExistsException, ValidationException),
)
async def update_user_me(
    current_user: get_current_user_ann,
    changes: UpdateProfileRequest,
    profiles: user_profile_service_ann,
) -> UserResponse:
    """
    Partial profile update, omitted fields stay unchanged.

    :param current_user: Claims of the caller.
    :param changes: New values.
    :param profiles: Profile service.
    :return: Updated user.
    :rtype: UserResponse
    """
    command = UpdateUserProfileCommand(user_id=current_user.user_id, **changes.model_dump())
    return UserResponse.model_validate(await profiles.update_user_profile(command))


@router.post(
    "/me/password",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse,
    summary="Update user password",
    responses=generate_responses(UserNotFoundException, InvalidPasswordException, UserAccountInactiveException),
)
async def change_password(
    current_user: get_current_user_ann,
    passwords: ChangePasswordRequest,
    profiles: user_profile_service_ann,
) -> SuccessResponse:
    """
    :param current_user: Claims of the caller.
    :param passwords: Current and new passwords.
    :param profiles: Profile service.
    :return: Success message.
    :rtype: SuccessResponse
    """
    await profiles.change_password(
        ChangePasswordCommand(
            user_id=current_user.user_id,
            current_password=passwords.current_password,
            new_password=passwords.new_password,
        )
    )
    return SuccessResponse(msg="Password updated successfully")


@router.post(
    "/me/deactivate",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse,
    summary="Deactivate current user account",
    description="All tokens of the account are revoked.",
    responses=generate_responses(UserNotFoundException),
)
async def deactivate_user_me(
    current_user: get_current_user_ann,
    profiles: user_profile_service_ann,
    tokens: token_service_ann,
) -> SuccessResponse:
    await profiles.deactivate_user(current_user.user_id)
    await tokens.revoke_all_for_user(current_user.user_id, DEACTIVATION_REASON)
    return SuccessResponse(msg="Account deactivated")


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=list[UserResponse],
    summary="List active users or search by username",
)
async def list_users(
    _: get_current_user_ann,
    profiles: user_profile_service_ann,
    username: Annotated[str | None, Query(description="Substring of the username")] = None,
) -> list[UserResponse]:
    if username is not None:
        users = await profiles.search_users_by_username(username)
    else:
        users = await profiles.get_all_active_users()
    return [UserResponse.model_validate(user) for user in users]


@router.get(
    "/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=UserResponse,
    summary="Get user by ID",
    responses=generate_responses(UserNotFoundException),
)
async def read_user(user_id: uuid.UUID, _: get_current_user_ann, profiles: user_profile_service_ann) -> UserResponse:
    return UserResponse.model_validate(await profiles.get_user_profile(user_id))
