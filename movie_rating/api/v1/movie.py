from typing import Annotated
import uuid

from fastapi import APIRouter, Query
from starlette import status

from movie_rating.api.openapi import generate_responses
from movie_rating.domain.commands import CreateMovieCommand, SearchMoviesCommand, UpdateMovieCommand
from movie_rating.domain.statistics import MovieRatingStatistics, TopRatedMovie, UserMovieStatistics
from movie_rating.exceptions.auth import InvalidTokenException
from movie_rating.exceptions.movie import (
    DuplicateMovieException,
    MovieNotFoundException,
    UnauthorizedMovieOperationException,
)
from movie_rating.exceptions.validation import ValidationException
from movie_rating.schemas.movie import CreateMovieRequest, MovieResponse, UpdateMovieRequest
from movie_rating.schemas.rating import RatingResponse
from movie_rating.services.auth import get_current_user_ann
from movie_rating.services.dependencies import movie_service_ann, rating_service_ann

router = APIRouter(prefix="/movies", tags=["movies"])

offset_ann = Annotated[int, Query(ge=0)]
limit_ann = Annotated[int, Query(ge=1, le=100)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MovieResponse,
    summary="Add a movie",
    responses=generate_responses(InvalidTokenException, DuplicateMovieException, ValidationException),
)
async def create_movie(
    movie: CreateMovieRequest, current_user: get_current_user_ann, movies: movie_service_ann
) -> MovieResponse:
    """
    Adds a movie on behalf of the caller, who becomes its owner.

    :param movie: Movie data.
    :param current_user: Claims of the caller.
    :param movies: Movie service.
    :return: Created movie.
    :rtype: MovieResponse
    """
    created = await movies.create_movie(CreateMovieCommand(created_by=current_user.user_id, **movie.model_dump()))
    return MovieResponse.model_validate(created)


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=list[MovieResponse],
    summary="List active movies",
    description="Without filters the active movies are paginated. Any filter switches to a search.",
)
async def list_movies(
    movies: movie_service_ann,
    offset: offset_ann = 0,
    limit: limit_ann = 20,
    title: str | None = None,
    year: int | None = None,
    created_by: uuid.UUID | None = None,
) -> list[MovieResponse]:
    if title is None and year is None and created_by is None:
        found = await movies.get_active_movies_paginated(offset, limit)
    else:
        found = await movies.search_movies(
            SearchMoviesCommand(title_pattern=title, year_of_release=year, created_by=created_by)
        )
    return [MovieResponse.model_validate(movie) for movie in found]


@router.get(
    "/top-rated",
    status_code=status.HTTP_200_OK,
    response_model=list[TopRatedMovie],
    summary="Best rated movies",
    description="Ratings of deactivated movies still count. Ties go to the movie with more ratings.",
)
async def top_rated_movies(
    ratings: rating_service_ann,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    min_ratings: Annotated[int, Query(ge=1)] = 1,
) -> list[TopRatedMovie]:
    return await ratings.get_top_rated_movies(limit=limit, min_rating_count=min_ratings)


@router.get(
    "/statistics/me",
    status_code=status.HTTP_200_OK,
    response_model=UserMovieStatistics,
    summary="Counts of movies added by current user",
    responses=generate_responses(InvalidTokenException),
)
async def my_movie_statistics(current_user: get_current_user_ann, movies: movie_service_ann) -> UserMovieStatistics:
    return await movies.get_user_movie_statistics(current_user.user_id)


@router.get(
    "/{movie_id}",
    status_code=status.HTTP_200_OK,
    response_model=MovieResponse,
    summary="Get movie by ID",
    responses=generate_responses(MovieNotFoundException),
)
async def read_movie(movie_id: uuid.UUID, movies: movie_service_ann) -> MovieResponse:
    return MovieResponse.model_validate(await movies.get_movie_by_id(movie_id))


@router.patch(
    "/{movie_id}",
    status_code=status.HTTP_200_OK,
    response_model=MovieResponse,
    summary="Update a movie",
    description="Only the user who added the movie may change it.",
    responses=generate_responses(
        MovieNotFoundException,
        UnauthorizedMovieOperationException,
        DuplicateMovieException,
        ValidationException,
    ),
)
async def update_movie(
    movie_id: uuid.UUID,
    changes: UpdateMovieRequest,
    current_user: get_current_user_ann,
    movies: movie_service_ann,
) -> MovieResponse:
    """
    :param movie_id: Movie ID.
    :param changes: New values, omitted fields stay unchanged.
    :param current_user: Claims of the caller.
    :param movies: Movie service.
    :return: Updated movie.
    :rtype: MovieResponse
    """
    command = UpdateMovieCommand(movie_id=movie_id, user_id=current_user.user_id, **changes.model_dump())
    return MovieResponse.model_validate(await movies.update_movie(command))


@router.delete(
    "/{movie_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a movie",
    responses=generate_responses(MovieNotFoundException, UnauthorizedMovieOperationException),
)
async def delete_movie(movie_id: uuid.UUID, current_user: get_current_user_ann, movies: movie_service_ann) -> None:
    await movies.delete_movie(movie_id, current_user.user_id)


@router.post(
    "/{movie_id}/reactivate",
    status_code=status.HTTP_200_OK,
    response_model=MovieResponse,
    summary="Reactivate a deactivated movie",
    responses=generate_responses(
        MovieNotFoundException,
        UnauthorizedMovieOperationException,
        DuplicateMovieException,
    ),
)
async def reactivate_movie(
    movie_id: uuid.UUID, current_user: get_current_user_ann, movies: movie_service_ann
) -> MovieResponse:
    return MovieResponse.model_validate(await movies.reactivate_movie(movie_id, current_user.user_id))


@router.get(
    "/{movie_id}/ratings",
    status_code=status.HTTP_200_OK,
    response_model=list[RatingResponse],
    summary="Active ratings of a movie",
    responses=generate_responses(MovieNotFoundException),
)
async def movie_ratings(
    movie_id: uuid.UUID,
    movies: movie_service_ann,
    ratings: rating_service_ann,
    offset: offset_ann = 0,
    limit: limit_ann = 20,
) -> list[RatingResponse]:
    await movies.get_movie_by_id(movie_id)
    found = await ratings.get_ratings_by_movie_paginated(movie_id, offset, limit)
    return [RatingResponse.model_validate(rating) for rating in found]


@router.get(
    "/{movie_id}/statistics",
    status_code=status.HTTP_200_OK,
    response_model=MovieRatingStatistics,
    summary="Rating statistics of a movie",
    responses=generate_responses(MovieNotFoundException),
)
async def movie_statistics(
    movie_id: uuid.UUID, movies: movie_service_ann, ratings: rating_service_ann
) -> MovieRatingStatistics:
    await movies.get_movie_by_id(movie_id)
    return await ratings.get_movie_rating_statistics(movie_id)
