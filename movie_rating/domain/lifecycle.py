from datetime import datetime
from typing import Annotated, Literal
import uuid

from pydantic import BaseModel, ConfigDict, Field


class Active(BaseModel):
    """The record takes part in normal queries."""

    model_config = ConfigDict(frozen=True)

    status: Literal["active"] = "active"


class Inactive(BaseModel):
    """
    The record is soft-deleted.

    :cvar datetime | None at: When the record was deactivated.
    :cvar uuid.UUID | None by: Who deactivated it, where that is tracked.
    """

    model_config = ConfigDict(frozen=True)

    status: Literal["inactive"] = "inactive"
    at: datetime | None = None
    by: uuid.UUID | None = None


Lifecycle = Annotated[Active | Inactive, Field(discriminator="status")]

ACTIVE = Active()


def lifecycle_from_columns(
    is_active: bool, deactivated_at: datetime | None = None, deactivated_by: uuid.UUID | None = None
) -> Active | Inactive:
    """
    Builds the lifecycle state from the flag and metadata columns of a row.

    Deactivation metadata left on an active row is ignored.

    :param is_active: Value of the is_active column.
    :param deactivated_at: Value of the deactivated_at column.
    :param deactivated_by: Value of the deactivated_by column.
    :return: Lifecycle state.
    :rtype: Active | Inactive
    """
    if is_active:
        return ACTIVE
    return Inactive(at=deactivated_at, by=deactivated_by)
