from __future__ import annotations

from datetime import UTC, datetime
import uuid

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from movie_rating.db.model.base import Base


class Movie(Base):
    """Movie added by a user. "Deleting" a movie only flips is_active."""

    __tablename__ = "movies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    plot: Mapped[str | None] = mapped_column(Text, nullable=True)
    year_of_release: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    deactivated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deactivated_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )


# One active movie per (title, year); inactive duplicates are allowed
Index(
    "uq_movies_active_title_year",
    func.lower(Movie.title),
    Movie.year_of_release,
    unique=True,
    postgresql_where=Movie.is_active,
    sqlite_where=Movie.is_active,
)
