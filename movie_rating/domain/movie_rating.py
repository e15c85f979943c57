from datetime import UTC, datetime
from typing import Self
import uuid

from pydantic import Field, field_validator

from movie_rating.domain.entity import DomainEntity
from movie_rating.domain.lifecycle import ACTIVE, Active, Inactive, Lifecycle

MIN_RATING = 1
MAX_RATING = 10
REVIEW_MAX_LENGTH = 5000


def rating_label(rating: int) -> str:
    if rating >= 9:
        return "Excellent"
    if rating >= 7:
        return "Good"
    if rating >= 5:
        return "Average"
    return "Poor"


class MovieRating(DomainEntity):
    """
    A user's rating of a movie on a 1-10 scale.

    :cvar uuid.UUID id: Rating ID.
    :cvar uuid.UUID movie_id: Rated movie.
    :cvar uuid.UUID user_id: Rating user.
    :cvar int rating: Score from 1 to 10.
    :cvar str | None review: Optional review text.
    :cvar Lifecycle lifecycle: Active or soft-deleted.
    :cvar datetime created_at: Creation time.
    :cvar datetime updated_at: Last modification time.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    movie_id: uuid.UUID
    user_id: uuid.UUID
    rating: int
    review: str | None = None
    lifecycle: Lifecycle = ACTIVE
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, value: int) -> int:
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        return value

    @field_validator("review")
    @classmethod
    def validate_review(cls, value: str | None) -> str | None:
        if value is not None and len(value) > REVIEW_MAX_LENGTH:
            raise ValueError(f"Review cannot exceed {REVIEW_MAX_LENGTH} characters")
        return value

    @property
    def is_active(self) -> bool:
        return isinstance(self.lifecycle, Active)

    @property
    def has_review(self) -> bool:
        return self.review is not None and bool(self.review.strip())

    @property
    def rating_summary(self) -> str:
        return f"{self.rating}/{MAX_RATING} ({rating_label(self.rating)})"

    def belongs_to_user(self, user_id: uuid.UUID) -> bool:
        return self.user_id == user_id

    def update_rating(self, rating: int | None = None, review: str | None = None) -> Self:
        """
        Applies a partial update. None leaves a field unchanged.

        :param rating: New score.
        :param review: New review.
        :return: Updated rating.
        :rtype: MovieRating
        :raises ValidationException: If the new score is out of range.
        """
        changes: dict = {"updated_at": datetime.now(UTC)}
        if rating is not None:
            changes["rating"] = rating
        if review is not None:
            changes["review"] = review
        return self.evolve(**changes)

    def deactivate(self) -> Self:
        if not self.is_active:
            return self
        now = datetime.now(UTC)
        return self.evolve(lifecycle=Inactive(at=now), updated_at=now)

    def reactivate(self) -> Self:
        if self.is_active:
            return self
        return self.evolve(lifecycle=ACTIVE, updated_at=datetime.now(UTC))
