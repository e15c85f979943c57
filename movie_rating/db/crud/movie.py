from datetime import UTC, datetime
from typing import Any
import uuid

from sqlalchemy import exists, func, select, update

from movie_rating.db.crud.base import SqlAlchemyRepository, as_utc
from movie_rating.db.model import Movie as MovieRow
from movie_rating.domain.lifecycle import lifecycle_from_columns
from movie_rating.domain.movie import Movie


def _to_domain(row: MovieRow) -> Movie:
    return Movie(
        id=row.id,
        title=row.title,
        plot=row.plot,
        year_of_release=row.year_of_release,
        created_by=row.created_by,
        lifecycle=lifecycle_from_columns(row.is_active, as_utc(row.deactivated_at), row.deactivated_by),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _to_values(movie: Movie) -> dict[str, Any]:
    return {
        "title": movie.title,
        "plot": movie.plot,
        "year_of_release": movie.year_of_release,
        "created_by": movie.created_by,
        "is_active": movie.is_active,
        "deactivated_at": movie.deactivated_at,
        "deactivated_by": movie.deactivated_by,
        "created_at": movie.created_at,
        "updated_at": movie.updated_at,
    }


_active = MovieRow.is_active.is_(True)
_newest_first = MovieRow.created_at.desc()


class SqlAlchemyMovieRepository(SqlAlchemyRepository):
    """Movies table adapter. Every list query returns active movies only."""

    async def save(self, movie: Movie) -> Movie:
        """
        Inserts or overwrites the movie.

        :param movie: Movie to store.
        :return: Stored movie.
        :rtype: Movie
        :raises IntegrityError: If an active movie with the same title and year exists.
        """
        return _to_domain(await self._upsert(MovieRow, movie.id, _to_values(movie)))

    async def find_by_id(self, movie_id: uuid.UUID) -> Movie | None:
        row = await self._one_or_none(select(MovieRow).where(MovieRow.id == movie_id))
        return _to_domain(row) if row else None

    async def _find(self, *criteria: Any, order_by: tuple[Any, ...] = (_newest_first,)) -> list[Movie]:
        query = select(MovieRow).where(_active, *criteria).order_by(*order_by)
        return [_to_domain(row) for row in await self._all(query)]

    async def find_all_active(self) -> list[Movie]:
        return await self._find()

    async def find_by_created_by(self, user_id: uuid.UUID) -> list[Movie]:
        return await self._find(MovieRow.created_by == user_id)

    async def find_by_title_containing(self, title_pattern: str) -> list[Movie]:
        return await self._find(MovieRow.title.icontains(title_pattern, autoescape=True), order_by=(MovieRow.title,))

    async def find_by_year_of_release(self, year: int) -> list[Movie]:
        return await self._find(MovieRow.year_of_release == year, order_by=(MovieRow.title,))

    async def find_by_year_of_release_between(self, start_year: int, end_year: int) -> list[Movie]:
        return await self._find(
            MovieRow.year_of_release.between(start_year, end_year),
            order_by=(MovieRow.year_of_release.desc(), MovieRow.title),
        )

    async def find_by_plot_containing(self, keyword: str) -> list[Movie]:
        return await self._find(MovieRow.plot.icontains(keyword, autoescape=True), order_by=(MovieRow.title,))

    async def exists_by_id(self, movie_id: uuid.UUID) -> bool:
        return bool(await self._scalar(select(exists().where(MovieRow.id == movie_id))))

    async def exists_by_title_and_year_of_release(self, title: str, year: int) -> bool:
        """Case-insensitive title match among active movies."""
        query = select(
            exists().where(
                func.lower(MovieRow.title) == title.lower(),
                MovieRow.year_of_release == year,
                _active,
            )
        )
        return bool(await self._scalar(query))

    async def delete_by_id(self, movie_id: uuid.UUID, deactivated_by: uuid.UUID | None = None) -> None:
        """Soft delete: the row stays, flagged inactive."""
        now = datetime.now(UTC)
        await self._execute(
            update(MovieRow)
            .where(MovieRow.id == movie_id, _active)
            .values(is_active=False, deactivated_at=now, deactivated_by=deactivated_by, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )

    async def count_active(self) -> int:
        return await self._scalar(select(func.count()).select_from(MovieRow).where(_active))

    async def count_by_created_by(self, user_id: uuid.UUID) -> int:
        return await self._scalar(select(func.count()).select_from(MovieRow).where(MovieRow.created_by == user_id))

    async def count_active_by_created_by(self, user_id: uuid.UUID) -> int:
        return await self._scalar(
            select(func.count()).select_from(MovieRow).where(MovieRow.created_by == user_id, _active)
        )

    async def find_all_active_with_pagination(self, offset: int, limit: int) -> list[Movie]:
        query = select(MovieRow).where(_active).order_by(_newest_first).offset(offset).limit(limit)
        return [_to_domain(row) for row in await self._all(query)]

    async def search_movies(
        self, title_pattern: str | None, year: int | None, created_by: uuid.UUID | None
    ) -> list[Movie]:
        """
        Combined filter; None criteria are skipped.

        :param title_pattern: Case-insensitive title substring.
        :param year: Exact year of release.
        :param created_by: Creator ID.
        :return: Matching active movies, newest first.
        :rtype: list[Movie]
        """
        criteria = []
        if title_pattern:
            criteria.append(MovieRow.title.icontains(title_pattern, autoescape=True))
        if year is not None:
            criteria.append(MovieRow.year_of_release == year)
        if created_by is not None:
            criteria.append(MovieRow.created_by == created_by)
        return await self._find(*criteria)
