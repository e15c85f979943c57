from datetime import UTC, datetime
from typing import Any
import uuid

from sqlalchemy import Float, cast, exists, func, select, update

from movie_rating.db.crud.base import SqlAlchemyRepository, as_utc
from movie_rating.db.model import MovieRating as MovieRatingRow
from movie_rating.domain.lifecycle import lifecycle_from_columns
from movie_rating.domain.movie_rating import MovieRating


def _to_domain(row: MovieRatingRow) -> MovieRating:
    return MovieRating(
        id=row.id,
        movie_id=row.movie_id,
        user_id=row.user_id,
        rating=row.rating,
        review=row.review,
        lifecycle=lifecycle_from_columns(row.is_active),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _to_values(rating: MovieRating) -> dict[str, Any]:
    return {
        "movie_id": rating.movie_id,
        "user_id": rating.user_id,
        "rating": rating.rating,
        "review": rating.review,
        "is_active": rating.is_active,
        "created_at": rating.created_at,
        "updated_at": rating.updated_at,
    }


_active = MovieRatingRow.is_active.is_(True)
_newest_first = MovieRatingRow.created_at.desc()
_average = func.avg(cast(MovieRatingRow.rating, Float))


class SqlAlchemyMovieRatingRepository(SqlAlchemyRepository):
    """Movie ratings table adapter."""

    async def save(self, rating: MovieRating) -> MovieRating:
        """
        Inserts or overwrites the rating.

        :param rating: Rating to store.
        :return: Stored rating.
        :rtype: MovieRating
        :raises IntegrityError: If the user already has an active rating for the movie.
        """
        return _to_domain(await self._upsert(MovieRatingRow, rating.id, _to_values(rating)))

    async def find_by_id(self, rating_id: uuid.UUID) -> MovieRating | None:
        row = await self._one_or_none(select(MovieRatingRow).where(MovieRatingRow.id == rating_id))
        return _to_domain(row) if row else None

    async def _find(self, *criteria: Any, order_by: Any = _newest_first) -> list[MovieRating]:
        query = select(MovieRatingRow).where(*criteria).order_by(order_by)
        return [_to_domain(row) for row in await self._all(query)]

    async def find_active_by_movie_id(self, movie_id: uuid.UUID) -> list[MovieRating]:
        return await self._find(MovieRatingRow.movie_id == movie_id, _active)

    async def find_active_by_user_id(self, user_id: uuid.UUID) -> list[MovieRating]:
        return await self._find(MovieRatingRow.user_id == user_id, _active)

    async def find_active_by_movie_id_and_user_id(
        self, movie_id: uuid.UUID, user_id: uuid.UUID
    ) -> MovieRating | None:
        query = select(MovieRatingRow).where(
            MovieRatingRow.movie_id == movie_id, MovieRatingRow.user_id == user_id, _active
        )
        row = await self._one_or_none(query)
        return _to_domain(row) if row else None

    async def find_all_by_movie_id(self, movie_id: uuid.UUID) -> list[MovieRating]:
        """Includes soft-deleted ratings."""
        return await self._find(MovieRatingRow.movie_id == movie_id)

    async def find_all_by_user_id(self, user_id: uuid.UUID) -> list[MovieRating]:
        """Includes soft-deleted ratings."""
        return await self._find(MovieRatingRow.user_id == user_id)

    async def find_active_by_movie_id_and_rating_between(
        self, movie_id: uuid.UUID, min_rating: int, max_rating: int
    ) -> list[MovieRating]:
        return await self._find(
            MovieRatingRow.movie_id == movie_id,
            MovieRatingRow.rating.between(min_rating, max_rating),
            _active,
            order_by=MovieRatingRow.rating.desc(),
        )

    async def find_active_by_movie_id_with_reviews(self, movie_id: uuid.UUID) -> list[MovieRating]:
        return await self._find(
            MovieRatingRow.movie_id == movie_id,
            MovieRatingRow.review.is_not(None),
            func.trim(MovieRatingRow.review) != "",
            _active,
        )

    async def find_active_by_created_at_between(self, start: datetime, end: datetime) -> list[MovieRating]:
        return await self._find(MovieRatingRow.created_at.between(start, end), _active)

    async def exists_active_by_movie_id_and_user_id(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        query = select(
            exists().where(MovieRatingRow.movie_id == movie_id, MovieRatingRow.user_id == user_id, _active)
        )
        return bool(await self._scalar(query))

    async def delete_by_id(self, rating_id: uuid.UUID) -> None:
        """Soft delete: the row stays, flagged inactive."""
        await self._execute(
            update(MovieRatingRow)
            .where(MovieRatingRow.id == rating_id, _active)
            .values(is_active=False, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session="fetch")
        )

    async def calculate_average_rating_by_movie_id(self, movie_id: uuid.UUID) -> float | None:
        """None when the movie has no active ratings."""
        average = await self._scalar(select(_average).where(MovieRatingRow.movie_id == movie_id, _active))
        return float(average) if average is not None else None

    async def count_active_by_movie_id(self, movie_id: uuid.UUID) -> int:
        return await self._scalar(
            select(func.count()).select_from(MovieRatingRow).where(MovieRatingRow.movie_id == movie_id, _active)
        )

    async def count_active_by_user_id(self, user_id: uuid.UUID) -> int:
        return await self._scalar(
            select(func.count()).select_from(MovieRatingRow).where(MovieRatingRow.user_id == user_id, _active)
        )

    async def find_top_rated_movie_ids(self, limit: int, min_rating_count: int) -> list[uuid.UUID]:
        """
        IDs of the movies with the highest average active rating.

        Ties go to the movie with more ratings, then to the lower ID.
        Deactivated movies are not filtered out.

        :param limit: Maximum number of movies.
        :param min_rating_count: Movies with fewer active ratings are skipped.
        :return: Movie IDs, best first.
        :rtype: list[uuid.UUID]
        """
        query = (
            select(MovieRatingRow.movie_id)
            .where(_active)
            .group_by(MovieRatingRow.movie_id)
            .having(func.count() >= min_rating_count)
            .order_by(_average.desc(), func.count().desc(), MovieRatingRow.movie_id)
            .limit(limit)
        )
        return await self._all(query)

    async def find_active_by_movie_id_with_pagination(
        self, movie_id: uuid.UUID, offset: int, limit: int
    ) -> list[MovieRating]:
        query = (
            select(MovieRatingRow)
            .where(MovieRatingRow.movie_id == movie_id, _active)
            .order_by(_newest_first)
            .offset(offset)
            .limit(limit)
        )
        return [_to_domain(row) for row in await self._all(query)]

    async def find_active_by_user_id_with_pagination(
        self, user_id: uuid.UUID, offset: int, limit: int
    ) -> list[MovieRating]:
        query = (
            select(MovieRatingRow)
            .where(MovieRatingRow.user_id == user_id, _active)
            .order_by(_newest_first)
            .offset(offset)
            .limit(limit)
        )
        return [_to_domain(row) for row in await self._all(query)]

    async def find_recent_ratings(self, limit: int) -> list[MovieRating]:
        query = select(MovieRatingRow).where(_active).order_by(_newest_first).limit(limit)
        return [_to_domain(row) for row in await self._all(query)]

    async def find_active_by_rating(self, rating: int) -> list[MovieRating]:
        return await self._find(MovieRatingRow.rating == rating, _active)
