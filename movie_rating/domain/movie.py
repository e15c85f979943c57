from datetime import UTC, datetime
from typing import Self
import uuid

from pydantic import Field, field_validator

from movie_rating.domain.entity import DomainEntity
from movie_rating.domain.lifecycle import ACTIVE, Active, Inactive, Lifecycle

TITLE_MAX_LENGTH = 255
PLOT_MAX_LENGTH = 10000
MIN_YEAR = 1888
YEARS_AHEAD = 5


def max_year_of_release() -> int:
    return datetime.now(UTC).year + YEARS_AHEAD


class Movie(DomainEntity):
    """
    Movie created by a user.

    :cvar uuid.UUID id: Movie ID.
    :cvar str title: Title, trimmed.
    :cvar str | None plot: Plot summary.
    :cvar int year_of_release: Year of release.
    :cvar uuid.UUID created_by: ID of the creating user.
    :cvar Lifecycle lifecycle: Active or Inactive(at, by).
    :cvar datetime created_at: Creation time.
    :cvar datetime updated_at: Last modification time.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    plot: str | None = None
    year_of_release: int
    created_by: uuid.UUID
    lifecycle: Lifecycle = ACTIVE
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        value = value.strip() if value else ""
        if not value:
            raise ValueError("Title cannot be empty")
        if len(value) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
        return value

    @field_validator("plot")
    @classmethod
    def validate_plot(cls, value: str | None) -> str | None:
        if value is not None and len(value) > PLOT_MAX_LENGTH:
            raise ValueError(f"Plot cannot exceed {PLOT_MAX_LENGTH} characters")
        return value

    @field_validator("year_of_release")
    @classmethod
    def validate_year(cls, value: int) -> int:
        max_year = max_year_of_release()
        if not MIN_YEAR <= value <= max_year:
            raise ValueError(f"Year of release must be between {MIN_YEAR} and {max_year}")
        return value

    @property
    def is_active(self) -> bool:
        return isinstance(self.lifecycle, Active)

    @property
    def deactivated_at(self) -> datetime | None:
        return self.lifecycle.at if isinstance(self.lifecycle, Inactive) else None

    @property
    def deactivated_by(self) -> uuid.UUID | None:
        return self.lifecycle.by if isinstance(self.lifecycle, Inactive) else None

    @property
    def display_title(self) -> str:
        return f"{self.title} ({self.year_of_release})"

    def is_created_by(self, user_id: uuid.UUID) -> bool:
        return self.created_by == user_id

    def update_with(
        self, title: str | None = None, plot: str | None = None, year_of_release: int | None = None
    ) -> Self:
        """
        Applies a partial update. None leaves a field unchanged.

        :param title: New title.
        :param plot: New plot.
        :param year_of_release: New year of release.
        :return: Updated movie.
        :rtype: Movie
        :raises ValidationException: If a new value breaks a rule.
        """
        changes: dict = {"updated_at": datetime.now(UTC)}
        if title is not None:
            changes["title"] = title
        if plot is not None:
            changes["plot"] = plot
        if year_of_release is not None:
            changes["year_of_release"] = year_of_release
        return self.evolve(**changes)

    def deactivate(self, deactivated_by: uuid.UUID) -> Self:
        if not self.is_active:
            return self
        now = datetime.now(UTC)
        return self.evolve(lifecycle=Inactive(at=now, by=deactivated_by), updated_at=now)

    def reactivate(self) -> Self:
        if self.is_active:
            return self
        return self.evolve(lifecycle=ACTIVE, updated_at=datetime.now(UTC))
