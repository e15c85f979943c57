from datetime import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field


class CreateMovieRequest(BaseModel):
    """
    New movie.

    :cvar str title: Title.
    :cvar str | None plot: Plot summary.
    :cvar int year_of_release: Year of release.
    """

    title: str = Field(min_length=1, max_length=255)
    plot: str | None = Field(default=None, max_length=10000)
    year_of_release: int = Field(ge=1888)


class UpdateMovieRequest(BaseModel):
    """Partial movie update; omitted fields stay unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    plot: str | None = Field(default=None, max_length=10000)
    year_of_release: int | None = Field(default=None, ge=1888)


class MovieResponse(BaseModel):
    """
    Movie data.

    :cvar str display_title: "Title (Year)".
    :cvar uuid.UUID | None deactivated_by: Who deactivated the movie, if inactive.
    """

    id: uuid.UUID
    title: str
    plot: str | None
    year_of_release: int
    display_title: str
    created_by: uuid.UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime
    deactivated_at: datetime | None = None
    deactivated_by: uuid.UUID | None = None

    model_config = ConfigDict(from_attributes=True)
