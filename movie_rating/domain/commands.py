from datetime import datetime
from typing import Annotated
import uuid

from pydantic import AfterValidator, BaseModel, ConfigDict


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class Command(BaseModel):
    """Immutable input of one service operation."""

    model_config = ConfigDict(frozen=True)


class RegisterUserCommand(Command):
    username: NonBlankStr
    email: NonBlankStr
    password: NonBlankStr
    first_name: NonBlankStr
    last_name: NonBlankStr


class AuthenticationCommand(Command):
    username_or_email: NonBlankStr
    password: NonBlankStr

    @property
    def is_email(self) -> bool:
        """Anything with "@" is looked up as an email, no syntax check."""
        return "@" in self.username_or_email


class UpdateUserProfileCommand(Command):
    """Partial update; None keeps the current value."""

    user_id: uuid.UUID
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class ChangePasswordCommand(Command):
    user_id: uuid.UUID
    current_password: NonBlankStr
    new_password: NonBlankStr


class CreateMovieCommand(Command):
    title: NonBlankStr
    plot: str | None = None
    year_of_release: int
    created_by: uuid.UUID


class UpdateMovieCommand(Command):
    """Partial update; None keeps the current value."""

    movie_id: uuid.UUID
    user_id: uuid.UUID
    title: str | None = None
    plot: str | None = None
    year_of_release: int | None = None

    @property
    def changes_identity(self) -> bool:
        return self.title is not None or self.year_of_release is not None


class SearchMoviesCommand(Command):
    title_pattern: str | None = None
    year_of_release: int | None = None
    created_by: uuid.UUID | None = None


class CreateRatingCommand(Command):
    movie_id: uuid.UUID
    user_id: uuid.UUID
    rating: int
    review: str | None = None


class UpdateRatingCommand(Command):
    """Partial update; None keeps the current value."""

    rating_id: uuid.UUID
    user_id: uuid.UUID
    rating: int | None = None
    review: str | None = None


class SearchRatingsCommand(Command):
    """
    Criteria for listing ratings. The first applicable criterion wins:
    movie, then user, then the date range, else the most recent ratings.
    """

    movie_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None
    min_rating: int | None = None
    max_rating: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int | None = None
