import asyncio
import logging
import uuid

from sqlalchemy.exc import IntegrityError

from movie_rating.domain.commands import CreateRatingCommand, SearchRatingsCommand, UpdateRatingCommand
from movie_rating.domain.movie_rating import MovieRating
from movie_rating.domain.ports import MovieRatingRepository, MovieRepository
from movie_rating.domain.statistics import (
    MovieRatingStatistics,
    RatingDistribution,
    TopRatedMovie,
    UserRatingStatistics,
)
from movie_rating.exceptions.movie import MovieNotFoundException, UnauthorizedMovieOperationException
from movie_rating.exceptions.rating import DuplicateRatingException, MovieRatingNotFoundException

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 50


def _count_reviews(ratings: list[MovieRating]) -> int:
    return sum(1 for rating in ratings if rating.has_review)


class ManageMovieRatingService:
    """
    Ratings of movies and their aggregates.

    A user has at most one active rating per movie and only the author may
    change or delete it.
    """

    def __init__(self, rating_repository: MovieRatingRepository, movie_repository: MovieRepository) -> None:
        self.rating_repository = rating_repository
        self.movie_repository = movie_repository

    async def create_rating(self, command: CreateRatingCommand) -> MovieRating:
        """
        :param command: Movie, author, score and review.
        :return: Created rating.
        :rtype: MovieRating
        :raises MovieNotFoundException: If the movie does not exist.
        :raises DuplicateRatingException: If the user already has an active rating for the movie.
        :raises ValidationException: If the score is out of range.
        """
        if not await self.movie_repository.exists_by_id(command.movie_id):
            raise MovieNotFoundException(command.movie_id)
        if await self.rating_repository.exists_active_by_movie_id_and_user_id(command.movie_id, command.user_id):
            logger.warning("User %s has already rated movie %s", command.user_id, command.movie_id)
            raise DuplicateRatingException(command.movie_id, command.user_id)

        rating = MovieRating.build(
            movie_id=command.movie_id,
            user_id=command.user_id,
            rating=command.rating,
            review=command.review,
        )
        try:
            saved = await self.rating_repository.save(rating)
        except IntegrityError as e:
            raise DuplicateRatingException(command.movie_id, command.user_id) from e

        logger.info("User %s rated movie %s with %s", saved.user_id, saved.movie_id, saved.rating)
        return saved

    async def get_rating_by_id(self, rating_id: uuid.UUID) -> MovieRating:
        """
        :param rating_id: Rating ID.
        :return: The rating.
        :rtype: MovieRating
        :raises MovieRatingNotFoundException: If the rating does not exist.
        """
        rating = await self.rating_repository.find_by_id(rating_id)
        if rating is None:
            raise MovieRatingNotFoundException(rating_id)
        return rating

    async def _get_owned_rating(self, rating_id: uuid.UUID, user_id: uuid.UUID, operation: str) -> MovieRating:
        rating = await self.get_rating_by_id(rating_id)
        if not rating.belongs_to_user(user_id):
            logger.warning("User %s tried to %s %s", user_id, operation, rating_id)
            raise UnauthorizedMovieOperationException(rating.movie_id, user_id, operation)
        return rating

    async def update_rating(self, command: UpdateRatingCommand) -> MovieRating:
        """
        Partially updates a rating on behalf of its author.

        :param command: Fields to change and the caller.
        :return: Updated rating.
        :rtype: MovieRating
        :raises MovieRatingNotFoundException: If the rating does not exist.
        :raises UnauthorizedMovieOperationException: If the caller is not the author.
        :raises ValidationException: If the new score is out of range.
        """
        rating = await self._get_owned_rating(command.rating_id, command.user_id, "update rating")
        saved = await self.rating_repository.save(rating.update_rating(rating=command.rating, review=command.review))
        logger.info("Updated rating %s", saved.id)
        return saved

    async def delete_rating(self, rating_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """
        Soft-deletes a rating on behalf of its author.

        :param rating_id: Rating ID.
        :param user_id: Caller.
        :raises MovieRatingNotFoundException: If the rating does not exist.
        :raises UnauthorizedMovieOperationException: If the caller is not the author.
        """
        await self._get_owned_rating(rating_id, user_id, "delete rating")
        await self.rating_repository.delete_by_id(rating_id)
        logger.info("Deleted rating %s", rating_id)

    async def get_ratings_by_movie(self, movie_id: uuid.UUID) -> list[MovieRating]:
        return await self.rating_repository.find_active_by_movie_id(movie_id)

    async def get_ratings_by_movie_paginated(self, movie_id: uuid.UUID, offset: int, limit: int) -> list[MovieRating]:
        return await self.rating_repository.find_active_by_movie_id_with_pagination(movie_id, offset, limit)

    async def get_ratings_by_user(self, user_id: uuid.UUID) -> list[MovieRating]:
        return await self.rating_repository.find_active_by_user_id(user_id)

    async def get_ratings_by_user_paginated(self, user_id: uuid.UUID, offset: int, limit: int) -> list[MovieRating]:
        return await self.rating_repository.find_active_by_user_id_with_pagination(user_id, offset, limit)

    async def get_user_rating_for_movie(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> MovieRating | None:
        return await self.rating_repository.find_active_by_movie_id_and_user_id(movie_id, user_id)

    async def get_ratings_by_movie_and_range(
        self, movie_id: uuid.UUID, min_rating: int, max_rating: int
    ) -> list[MovieRating]:
        return await self.rating_repository.find_active_by_movie_id_and_rating_between(movie_id, min_rating, max_rating)

    async def get_ratings_with_reviews_by_movie(self, movie_id: uuid.UUID) -> list[MovieRating]:
        return await self.rating_repository.find_active_by_movie_id_with_reviews(movie_id)

    async def get_recent_ratings(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[MovieRating]:
        return await self.rating_repository.find_recent_ratings(limit)

    async def get_average_rating(self, movie_id: uuid.UUID) -> float:
        average = await self.rating_repository.calculate_average_rating_by_movie_id(movie_id)
        return average if average is not None else 0.0

    async def search_ratings(self, command: SearchRatingsCommand) -> list[MovieRating]:
        """
        Lists ratings by the first applicable criterion: movie (optionally
        narrowed to a score range), user, creation date range, else the most
        recent ratings.

        :param command: Search criteria.
        :return: Matching active ratings.
        :rtype: list[MovieRating]
        """
        if command.movie_id is not None:
            if command.min_rating is not None and command.max_rating is not None:
                return await self.get_ratings_by_movie_and_range(
                    command.movie_id, command.min_rating, command.max_rating
                )
            return await self.get_ratings_by_movie(command.movie_id)
        if command.user_id is not None:
            return await self.get_ratings_by_user(command.user_id)
        if command.start_date is not None and command.end_date is not None:
            return await self.rating_repository.find_active_by_created_at_between(
                command.start_date, command.end_date
            )
        return await self.get_recent_ratings(command.limit if command.limit is not None else DEFAULT_RECENT_LIMIT)

    async def get_movie_rating_statistics(self, movie_id: uuid.UUID) -> MovieRatingStatistics:
        """
        Aggregates the active ratings of a movie.

        Count, average and the rating list are read concurrently; an empty
        list gives all-zero statistics.

        :param movie_id: Movie ID.
        :return: Count, average, extremes, reviewed count and score distribution.
        :rtype: MovieRatingStatistics
        """
        total, average, ratings = await asyncio.gather(
            self.rating_repository.count_active_by_movie_id(movie_id),
            self.get_average_rating(movie_id),
            self.rating_repository.find_active_by_movie_id(movie_id),
        )
        if not ratings:
            return MovieRatingStatistics(
                movie_id=movie_id,
                total_ratings=0,
                average_rating=0.0,
                min_rating=0,
                max_rating=0,
                ratings_with_reviews=0,
                distribution=RatingDistribution(),
            )

        scores = [rating.rating for rating in ratings]
        return MovieRatingStatistics(
            movie_id=movie_id,
            total_ratings=total,
            average_rating=average,
            min_rating=min(scores),
            max_rating=max(scores),
            ratings_with_reviews=_count_reviews(ratings),
            distribution=RatingDistribution.from_ratings(ratings),
        )

    async def get_user_rating_statistics(self, user_id: uuid.UUID) -> UserRatingStatistics:
        """
        Aggregates the active ratings given by a user.

        :param user_id: User ID.
        :return: Count, average, extremes, reviewed count and first/last rating dates.
        :rtype: UserRatingStatistics
        """
        ratings = await self.rating_repository.find_active_by_user_id(user_id)
        if not ratings:
            return UserRatingStatistics(
                user_id=user_id,
                total_ratings=0,
                average_rating_given=0.0,
                min_rating=0,
                max_rating=0,
                ratings_with_reviews=0,
            )

        scores = [rating.rating for rating in ratings]
        created = [rating.created_at for rating in ratings]
        return UserRatingStatistics(
            user_id=user_id,
            total_ratings=len(ratings),
            average_rating_given=sum(scores) / len(scores),
            min_rating=min(scores),
            max_rating=max(scores),
            ratings_with_reviews=_count_reviews(ratings),
            first_rating_date=min(created),
            last_rating_date=max(created),
        )

    async def get_top_rated_movies(self, limit: int, min_rating_count: int) -> list[TopRatedMovie]:
        """
        Best rated movies with at least min_rating_count active ratings.

        :param limit: Maximum number of movies.
        :param min_rating_count: Minimum number of active ratings.
        :return: Movies with their average and count, best first.
        :rtype: list[TopRatedMovie]
        """
        movie_ids = await self.rating_repository.find_top_rated_movie_ids(limit, min_rating_count)

        async def describe(movie_id: uuid.UUID) -> TopRatedMovie:
            average, total = await asyncio.gather(
                self.get_average_rating(movie_id),
                self.rating_repository.count_active_by_movie_id(movie_id),
            )
            return TopRatedMovie(movie_id=movie_id, average_rating=average, total_ratings=total)

        return list(await asyncio.gather(*(describe(movie_id) for movie_id in movie_ids)))

    async def has_user_rated_movie(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.rating_repository.exists_active_by_movie_id_and_user_id(movie_id, user_id)

    async def can_user_modify_rating(self, rating_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        rating = await self.rating_repository.find_by_id(rating_id)
        return rating is not None and rating.belongs_to_user(user_id)
