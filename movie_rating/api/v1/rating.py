from datetime import datetime
from typing import Annotated
import uuid

from fastapi import APIRouter, Query
from starlette import status

from movie_rating.api.openapi import generate_responses
from movie_rating.domain.commands import CreateRatingCommand, SearchRatingsCommand, UpdateRatingCommand
from movie_rating.domain.movie_rating import MAX_RATING, MIN_RATING
from movie_rating.domain.statistics import UserRatingStatistics
from movie_rating.exceptions.auth import InvalidTokenException
from movie_rating.exceptions.movie import MovieNotFoundException, UnauthorizedMovieOperationException
from movie_rating.exceptions.rating import DuplicateRatingException, MovieRatingNotFoundException
from movie_rating.exceptions.validation import ValidationException
from movie_rating.schemas.rating import CreateRatingRequest, RatingResponse, UpdateRatingRequest
from movie_rating.services.auth import get_current_user_ann
from movie_rating.services.dependencies import rating_service_ann

router = APIRouter(prefix="/ratings", tags=["ratings"])

score_ann = Annotated[int | None, Query(ge=MIN_RATING, le=MAX_RATING)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=RatingResponse,
    summary="Rate a movie",
    description="A user holds at most one active rating per movie.",
    responses=generate_responses(
        InvalidTokenException,
        MovieNotFoundException,
        DuplicateRatingException,
        ValidationException,
    ),
)
async def create_rating(
    rating: CreateRatingRequest, current_user: get_current_user_ann, ratings: rating_service_ann
) -> RatingResponse:
    """
    :param rating: Movie, score and optional review.
    :param current_user: Claims of the caller.
    :param ratings: Rating service.
    :return: Created rating.
    :rtype: RatingResponse
    """
    created = await ratings.create_rating(CreateRatingCommand(user_id=current_user.user_id, **rating.model_dump()))
    return RatingResponse.model_validate(created)


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=list[RatingResponse],
    summary="Search active ratings",
    description=(
        "Filters apply in order: movie (optionally narrowed by min and max score), user, "
        "creation date range. Without filters the most recent ratings are returned."
    ),
)
async def search_ratings(
    ratings: rating_service_ann,
    movie_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    min_rating: score_ann = None,
    max_rating: score_ann = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[RatingResponse]:
    command = SearchRatingsCommand(
        movie_id=movie_id,
        user_id=user_id,
        min_rating=min_rating,
        max_rating=max_rating,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return [RatingResponse.model_validate(rating) for rating in await ratings.search_ratings(command)]


@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    response_model=list[RatingResponse],
    summary="Active ratings of current user",
    responses=generate_responses(InvalidTokenException),
)
async def my_ratings(
    current_user: get_current_user_ann,
    ratings: rating_service_ann,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> list[RatingResponse]:
    found = await ratings.get_ratings_by_user_paginated(current_user.user_id, offset, limit)
    return [RatingResponse.model_validate(rating) for rating in found]


@router.get(
    "/statistics/me",
    status_code=status.HTTP_200_OK,
    response_model=UserRatingStatistics,
    summary="Rating statistics of current user",
    responses=generate_responses(InvalidTokenException),
)
async def my_rating_statistics(
    current_user: get_current_user_ann, ratings: rating_service_ann
) -> UserRatingStatistics:
    return await ratings.get_user_rating_statistics(current_user.user_id)


@router.get(
    "/{rating_id}",
    status_code=status.HTTP_200_OK,
    response_model=RatingResponse,
    summary="Get rating by ID",
    responses=generate_responses(MovieRatingNotFoundException),
)
async def read_rating(rating_id: uuid.UUID, ratings: rating_service_ann) -> RatingResponse:
    return RatingResponse.model_validate(await ratings.get_rating_by_id(rating_id))


@router.patch(
    "/{rating_id}",
    status_code=status.HTTP_200_OK,
    response_model=RatingResponse,
    summary="Update own rating",
    responses=generate_responses(
        MovieRatingNotFoundException,
        UnauthorizedMovieOperationException,
        ValidationException,
    ),
)
async def update_rating(
    rating_id: uuid.UUID,
    changes: UpdateRatingRequest,
    current_user: get_current_user_ann,
    ratings: rating_service_ann,
) -> RatingResponse:
    """
    :param rating_id: Rating ID.
    :param changes: New score and/or review, omitted fields stay unchanged.
    :param current_user: Claims of the caller.
    :param ratings: Rating service.
    :return: Updated rating.
    :rtype: RatingResponse
    """
    command = UpdateRatingCommand(rating_id=rating_id, user_id=current_user.user_id, **changes.model_dump())
    return RatingResponse.model_validate(await ratings.update_rating(command))


@router.delete(
    "/{rating_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete own rating",
    responses=generate_responses(MovieRatingNotFoundException, UnauthorizedMovieOperationException),
)
async def delete_rating(rating_id: uuid.UUID, current_user: get_current_user_ann, ratings: rating_service_ann) -> None:
    await ratings.delete_rating(rating_id, current_user.user_id)
