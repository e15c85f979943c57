from __future__ import annotations

from datetime import UTC, datetime
import uuid

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from movie_rating.db.model.base import Base


class MovieRating(Base):
    """A user's 1-10 rating of a movie with an optional review."""

    __tablename__ = "movie_ratings"
    __table_args__ = (CheckConstraint("rating >= 1 AND rating <= 10", name="ck_movie_ratings_rating_range"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    movie_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("movies.id"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )


# At most one active rating per (movie, user)
Index(
    "uq_movie_ratings_active_movie_user",
    MovieRating.movie_id,
    MovieRating.user_id,
    unique=True,
    postgresql_where=MovieRating.is_active,
    sqlite_where=MovieRating.is_active,
)
