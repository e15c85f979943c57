from starlette.status import HTTP_401_UNAUTHORIZED

from movie_rating.exceptions.base import AppHTTPException


class AuthenticationFailedException(AppHTTPException):
    """Wrong credentials. Never says which part was wrong."""

    status_code = HTTP_401_UNAUTHORIZED
    detail = "Invalid username/email or password"
    example = {"detail": "Invalid username/email or password"}
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidPasswordException(AppHTTPException):
    """The current password given on password change does not match."""

    status_code = HTTP_401_UNAUTHORIZED
    detail = "Current password is incorrect"
    example = {"detail": "Current password is incorrect"}


class InvalidTokenException(AppHTTPException):
    """Bad signature, malformed, expired or revoked token."""

    status_code = HTTP_401_UNAUTHORIZED
    detail = "Invalid token"
    example = {"detail": "Invalid token"}
    headers = {"WWW-Authenticate": "Bearer"}
