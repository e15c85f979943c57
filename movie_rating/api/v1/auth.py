from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import EmailStr
from starlette import status

from movie_rating.api.openapi import generate_responses
from movie_rating.domain.commands import RegisterUserCommand
from movie_rating.exceptions.auth import AuthenticationFailedException, InvalidTokenException
from movie_rating.exceptions.user import (
    EmailAlreadyExistsException,
    UserAccountInactiveException,
    UserCreationException,
    UserNotFoundException,
    UsernameAlreadyExistsException,
)
from movie_rating.exceptions.validation import ValidationException
from movie_rating.schemas.success_msg import SuccessResponse
from movie_rating.schemas.token import AccessToken, RefreshTokenRequest, TokenPair
from movie_rating.schemas.user import AvailabilityResponse, RegisterUserRequest, UserResponse
from movie_rating.services.auth import auth_service_ann, oauth2_ann
from movie_rating.services.dependencies import register_user_service_ann

router = APIRouter(prefix="/auth", tags=["auth"])

oauth_pwd_ann = Annotated[OAuth2PasswordRequestForm, Depends()]


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    summary="Register a new user",
    responses=generate_responses(
        UsernameAlreadyExistsException,
        EmailAlreadyExistsException,
        ValidationException,
        UserCreationException,
    ),
)
async def register(user: RegisterUserRequest, registration: register_user_service_ann) -> UserResponse:
    """
    Registration of a new user account.

    :param user: Registration data.
    :param registration: Registration service.
    :return: Created user.
    :rtype: UserResponse
    """
    created = await registration.register_user(RegisterUserCommand(**user.model_dump()))
    return UserResponse.model_validate(created)


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=TokenPair,
    summary="Login user",
    description="The `username` form field accepts either a username or an email.",
    responses=generate_responses(AuthenticationFailedException, UserAccountInactiveException),
)
async def login(form_data: oauth_pwd_ann, auth: auth_service_ann) -> TokenPair:
    """
    :param form_data: Form with username (or email) and password.
    :param auth: Auth service.
    :return: Access and refresh tokens.
    :rtype: TokenPair
    """
    return await auth.login(username_or_email=form_data.username, password=form_data.password)


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=AccessToken,
    summary="Get new access token via refresh one",
    responses=generate_responses(InvalidTokenException, UserNotFoundException, UserAccountInactiveException),
)
async def refresh(request: RefreshTokenRequest, auth: auth_service_ann) -> AccessToken:
    return await auth.refresh(request.refresh_token)


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse,
    summary="Logout user",
)
async def logout_user(
    access_token: oauth2_ann,
    auth: auth_service_ann,
    request: RefreshTokenRequest | None = None,
) -> SuccessResponse:
    """
    Revokes the bearer token and, when given, the refresh token.

    :param access_token: Access token from the Authorization header.
    :param auth: Auth service.
    :param request: Optional refresh token in the body.
    :return: Success message.
    :rtype: SuccessResponse
    """
    return await auth.logout(access_token, request.refresh_token if request else None)


@router.get(
    "/availability/username",
    status_code=status.HTTP_200_OK,
    response_model=AvailabilityResponse,
    summary="Check whether a username is free",
)
async def username_availability(
    registration: register_user_service_ann, username: Annotated[str, Query(min_length=1)]
) -> AvailabilityResponse:
    return AvailabilityResponse(available=await registration.is_username_available(username))


@router.get(
    "/availability/email",
    status_code=status.HTTP_200_OK,
    response_model=AvailabilityResponse,
    summary="Check whether an email is free",
)
async def email_availability(registration: register_user_service_ann, email: EmailStr) -> AvailabilityResponse:
    return AvailabilityResponse(available=await registration.is_email_available(email))
