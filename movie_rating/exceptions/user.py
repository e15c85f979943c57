from starlette.status import HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT, HTTP_500_INTERNAL_SERVER_ERROR

from movie_rating.exceptions.base import AppHTTPException


class UserNotFoundException(AppHTTPException):
    """No user with the requested id, username or email."""

    status_code = HTTP_404_NOT_FOUND
    detail = "User is not found"
    example = {"detail": "User is not found"}


class UsernameAlreadyExistsException(AppHTTPException):
    """Registration with a username that is already taken."""

    status_code = HTTP_409_CONFLICT
    detail = "Username '{username}' already exists"
    example = {"detail": "Username 'alice' already exists"}

    def __init__(self, username: str) -> None:
        """
        :param username: The taken username.
        """
        super().__init__(detail=self.detail.format(username=username))
        self.username = username


class EmailAlreadyExistsException(AppHTTPException):
    """Registration or profile update with an email that is already taken."""

    status_code = HTTP_409_CONFLICT
    detail = "Email '{email}' already exists"
    example = {"detail": "Email 'alice@example.com' already exists"}

    def __init__(self, email: str) -> None:
        """
        :param email: The taken email.
        """
        super().__init__(detail=self.detail.format(email=email))
        self.email = email


class UserAccountInactiveException(AppHTTPException):
    """The account has been deactivated."""

    status_code = HTTP_403_FORBIDDEN
    detail = "User account is inactive"
    example = {"detail": "User account is inactive"}


class UserCreationException(AppHTTPException):
    """The user row could not be written."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Failed to create user"
    example = {"detail": "Failed to create user"}
