from typing import Any

from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from movie_rating.exceptions.base import AppHTTPException


def generate_responses(*exceptions: type[AppHTTPException]) -> dict[int | str, dict[str, Any]]:
    """
    Builds the `responses` mapping of a route from the exceptions it can raise.

    Exceptions sharing a status code are listed as named examples of that code.

    :param exceptions: AppHTTPException subclasses.
    :return: Value for the `responses` argument of a FastAPI route decorator.
    """
    responses: dict[int | str, dict[str, Any]] = {}
    for exc in exceptions:
        status_code = exc.status_code
        if status_code not in responses:
            responses[status_code] = {
                "description": exc.example.get("detail", exc.detail),
                "content": {"application/json": {"examples": {}}},
            }

        response_name = exc.__name__.replace("Exception", "")
        example_data: dict[str, Any] = {"summary": exc.example.get("detail", exc.detail), "value": exc.example}

        responses[status_code]["content"]["application/json"]["examples"][response_name] = example_data

    if HTTP_422_UNPROCESSABLE_CONTENT in responses:
        # request body errors share the code with domain validation errors
        request_validation_example: dict[str, Any] = {
            "summary": "Request validation error",
            "value": {"detail": [{"loc": ["body", "field_name"], "msg": "Field required", "type": "missing"}]},
        }
        examples = responses[HTTP_422_UNPROCESSABLE_CONTENT]["content"]["application/json"]["examples"]
        examples["RequestValidationError"] = request_validation_example

    return responses
