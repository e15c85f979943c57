from typing import Any

from fastapi import HTTPException
from starlette.status import HTTP_400_BAD_REQUEST


class AppHTTPException(HTTPException):
    """
    Base class for the typed failures of the service.

    Every failure knows its HTTP status, so routers re-raise nothing.

    :cvar int status_code: HTTP status code.
    :cvar str detail: Error description, may contain format placeholders.
    :cvar dict example: Example response body for the OpenAPI docs.
    :cvar dict[str, str] headers: HTTP headers for the response.
    """

    status_code: int = HTTP_400_BAD_REQUEST
    detail: str = "An error occurred"
    example: dict[str, Any] = {"detail": "An error occurred"}
    headers: dict[str, str] = {}

    def __init__(
        self,
        status_code: int | None = None,
        detail: str | None = None,
        example: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        :param status_code: HTTP status code.
        :param detail: Error description.
        :param example: Example response for the docs.
        :param headers: HTTP headers for the response.
        """
        super().__init__(
            status_code=status_code or self.status_code, detail=detail or self.detail, headers=headers or self.headers
        )
        self.example = example or self.example
