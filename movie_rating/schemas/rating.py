from datetime import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field

from movie_rating.domain.movie_rating import MAX_RATING, MIN_RATING, REVIEW_MAX_LENGTH


class CreateRatingRequest(BaseModel):
    """
    New rating.

    :cvar uuid.UUID movie_id: Rated movie.
    :cvar int rating: Score from 1 to 10.
    :cvar str | None review: Review text.
    """

    movie_id: uuid.UUID
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    review: str | None = Field(default=None, max_length=REVIEW_MAX_LENGTH)


class UpdateRatingRequest(BaseModel):
    """Partial rating update; omitted fields stay unchanged."""

    rating: int | None = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    review: str | None = Field(default=None, max_length=REVIEW_MAX_LENGTH)


class RatingResponse(BaseModel):
    """
    Rating data.

    :cvar str rating_summary: Score with its label, e.g. "8/10 (Good)".
    """

    id: uuid.UUID
    movie_id: uuid.UUID
    user_id: uuid.UUID
    rating: int
    review: str | None
    rating_summary: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
