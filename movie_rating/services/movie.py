import asyncio
import logging
import uuid

from sqlalchemy.exc import IntegrityError

from movie_rating.domain.commands import CreateMovieCommand, SearchMoviesCommand, UpdateMovieCommand
from movie_rating.domain.movie import Movie
from movie_rating.domain.ports import MovieRepository
from movie_rating.domain.statistics import UserMovieStatistics
from movie_rating.exceptions.movie import (
    DuplicateMovieException,
    MovieNotFoundException,
    UnauthorizedMovieOperationException,
)

logger = logging.getLogger(__name__)


class ManageMovieService:
    """
    Movie catalogue operations.

    Only the creator of a movie may change it, and (title, year) is unique
    among active movies.
    """

    def __init__(self, movie_repository: MovieRepository) -> None:
        self.movie_repository = movie_repository

    async def create_movie(self, command: CreateMovieCommand) -> Movie:
        """
        :param command: New movie data.
        :return: Created movie.
        :rtype: Movie
        :raises DuplicateMovieException: If an active movie with the same title and year exists.
        :raises ValidationException: If the data breaks the movie rules.
        """
        title = command.title.strip()
        if await self.movie_repository.exists_by_title_and_year_of_release(title, command.year_of_release):
            logger.warning("Movie %s (%s) already exists", title, command.year_of_release)
            raise DuplicateMovieException(title, command.year_of_release)

        movie = Movie.build(
            title=title,
            plot=command.plot,
            year_of_release=command.year_of_release,
            created_by=command.created_by,
        )
        try:
            saved = await self.movie_repository.save(movie)
        except IntegrityError as e:
            raise DuplicateMovieException(title, command.year_of_release) from e

        logger.info("Created movie %s with id %s", saved.display_title, saved.id)
        return saved

    async def get_movie_by_id(self, movie_id: uuid.UUID) -> Movie:
        """
        :param movie_id: Movie ID.
        :return: The movie, active or not.
        :rtype: Movie
        :raises MovieNotFoundException: If the movie does not exist.
        """
        movie = await self.movie_repository.find_by_id(movie_id)
        if movie is None:
            raise MovieNotFoundException(movie_id)
        return movie

    async def _get_owned_movie(self, movie_id: uuid.UUID, user_id: uuid.UUID, operation: str) -> Movie:
        movie = await self.get_movie_by_id(movie_id)
        if not movie.is_created_by(user_id):
            logger.warning("User %s tried to %s movie %s", user_id, operation, movie_id)
            raise UnauthorizedMovieOperationException(movie_id, user_id, operation)
        return movie

    async def update_movie(self, command: UpdateMovieCommand) -> Movie:
        """
        Partially updates a movie on behalf of its creator.

        :param command: Fields to change and the caller.
        :return: Updated movie.
        :rtype: Movie
        :raises MovieNotFoundException: If the movie does not exist.
        :raises UnauthorizedMovieOperationException: If the caller is not the creator.
        :raises DuplicateMovieException: If the new title and year clash with another active movie.
        :raises ValidationException: If a new value breaks the movie rules.
        """
        movie = await self._get_owned_movie(command.movie_id, command.user_id, "update")

        title = command.title.strip() if command.title is not None else None
        if command.changes_identity:
            new_title = title if title is not None else movie.title
            new_year = command.year_of_release if command.year_of_release is not None else movie.year_of_release
            identity_changed = (new_title.lower(), new_year) != (movie.title.lower(), movie.year_of_release)
            if identity_changed and await self.movie_repository.exists_by_title_and_year_of_release(
                new_title, new_year
            ):
                logger.warning("Movie %s (%s) already exists", new_title, new_year)
                raise DuplicateMovieException(new_title, new_year)
        else:
            new_title, new_year = movie.title, movie.year_of_release

        updated = movie.update_with(title=title, plot=command.plot, year_of_release=command.year_of_release)
        try:
            saved = await self.movie_repository.save(updated)
        except IntegrityError as e:
            raise DuplicateMovieException(new_title, new_year) from e

        logger.info("Updated movie %s", saved.id)
        return saved

    async def deactivate_movie(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """
        Soft-deletes a movie on behalf of its creator.

        :param movie_id: Movie ID.
        :param user_id: Caller.
        :raises MovieNotFoundException: If the movie does not exist.
        :raises UnauthorizedMovieOperationException: If the caller is not the creator.
        """
        await self._get_owned_movie(movie_id, user_id, "deactivate")
        await self.movie_repository.delete_by_id(movie_id, deactivated_by=user_id)
        logger.info("Deactivated movie %s", movie_id)

    async def delete_movie(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Same as deactivate_movie; movies are never physically removed."""
        await self._get_owned_movie(movie_id, user_id, "delete")
        await self.movie_repository.delete_by_id(movie_id, deactivated_by=user_id)
        logger.info("Deleted movie %s", movie_id)

    async def reactivate_movie(self, movie_id: uuid.UUID, user_id: uuid.UUID | None = None) -> Movie:
        """
        Brings a soft-deleted movie back. An active movie is returned unchanged.

        :param movie_id: Movie ID.
        :param user_id: Caller; when given, must be the creator.
        :return: Active movie.
        :rtype: Movie
        :raises MovieNotFoundException: If the movie does not exist.
        :raises UnauthorizedMovieOperationException: If the caller is not the creator.
        :raises DuplicateMovieException: If an active movie with the same title and year appeared meanwhile.
        """
        if user_id is None:
            movie = await self.get_movie_by_id(movie_id)
        else:
            movie = await self._get_owned_movie(movie_id, user_id, "reactivate")
        if movie.is_active:
            logger.warning("Movie %s is already active", movie_id)
            return movie
        if await self.movie_repository.exists_by_title_and_year_of_release(movie.title, movie.year_of_release):
            logger.warning("Cannot reactivate movie %s, %s is taken", movie_id, movie.display_title)
            raise DuplicateMovieException(movie.title, movie.year_of_release)

        try:
            saved = await self.movie_repository.save(movie.reactivate())
        except IntegrityError as e:
            raise DuplicateMovieException(movie.title, movie.year_of_release) from e
        logger.info("Reactivated movie %s", movie_id)
        return saved

    async def get_all_active_movies(self) -> list[Movie]:
        return await self.movie_repository.find_all_active()

    async def get_active_movies_paginated(self, offset: int, limit: int) -> list[Movie]:
        return await self.movie_repository.find_all_active_with_pagination(offset, limit)

    async def get_movies_by_creator(self, user_id: uuid.UUID) -> list[Movie]:
        return await self.movie_repository.find_by_created_by(user_id)

    async def search_movies_by_title(self, title_pattern: str) -> list[Movie]:
        return await self.movie_repository.find_by_title_containing(title_pattern.strip())

    async def get_movies_by_year(self, year: int) -> list[Movie]:
        return await self.movie_repository.find_by_year_of_release(year)

    async def get_movies_by_year_range(self, start_year: int, end_year: int) -> list[Movie]:
        return await self.movie_repository.find_by_year_of_release_between(start_year, end_year)

    async def search_movies_by_plot(self, keyword: str) -> list[Movie]:
        return await self.movie_repository.find_by_plot_containing(keyword.strip())

    async def search_movies(self, command: SearchMoviesCommand) -> list[Movie]:
        title_pattern = command.title_pattern.strip() if command.title_pattern else None
        return await self.movie_repository.search_movies(title_pattern, command.year_of_release, command.created_by)

    async def movie_exists(self, movie_id: uuid.UUID) -> bool:
        return await self.movie_repository.exists_by_id(movie_id)

    async def can_user_modify_movie(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        movie = await self.movie_repository.find_by_id(movie_id)
        return movie is not None and movie.is_created_by(user_id)

    async def get_active_movie_count(self) -> int:
        return await self.movie_repository.count_active()

    async def get_user_movie_statistics(self, user_id: uuid.UUID) -> UserMovieStatistics:
        """
        :param user_id: Creator ID.
        :return: Created, active and deactivated movie counts.
        :rtype: UserMovieStatistics
        """
        total, active = await asyncio.gather(
            self.movie_repository.count_by_created_by(user_id),
            self.movie_repository.count_active_by_created_by(user_id),
        )
        return UserMovieStatistics(
            user_id=user_id, total_movies=total, active_movies=active, deactivated_movies=total - active
        )
