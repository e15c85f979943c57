from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from movie_rating.exceptions.base import AppHTTPException


class ValidationException(AppHTTPException):
    """
    Domain data failed its structural rules.

    :cvar dict[str, str] errors: Field name to message map.
    """

    status_code = HTTP_422_UNPROCESSABLE_CONTENT
    detail = "Validation failed"
    example = {"detail": "Validation failed", "errors": {"title": "Title cannot be empty"}}

    def __init__(self, message: str | None = None, errors: dict[str, str] | None = None) -> None:
        """
        :param message: Summary of the failure.
        :param errors: Field name to message map.
        """
        super().__init__(detail=message)
        self.errors: dict[str, str] = errors or {}
