from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """
    Message about a successful operation.

    :cvar str msg: Success message.
    """

    msg: str
