import uuid

from starlette.status import HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from movie_rating.exceptions.base import AppHTTPException


class MovieRatingNotFoundException(AppHTTPException):
    """No rating with the requested id."""

    status_code = HTTP_404_NOT_FOUND
    detail = "Rating with id {rating_id} not found"
    example = {"detail": "Rating with id 3fa85f64-5717-4562-b3fc-2c963f66afa6 not found"}

    def __init__(self, rating_id: uuid.UUID) -> None:
        """
        :param rating_id: ID of the missing rating.
        """
        super().__init__(detail=self.detail.format(rating_id=rating_id))
        self.rating_id = rating_id


class DuplicateRatingException(AppHTTPException):
    """The user already has an active rating for the movie."""

    status_code = HTTP_409_CONFLICT
    detail = "User {user_id} has already rated movie {movie_id}"
    example = {
        "detail": "User 3fa85f64-5717-4562-b3fc-2c963f66afa6 has already rated "
        "movie 9c1f0e5a-1d2b-4c3d-8e4f-5a6b7c8d9e0f"
    }

    def __init__(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """
        :param movie_id: ID of the rated movie.
        :param user_id: ID of the rating user.
        """
        super().__init__(detail=self.detail.format(user_id=user_id, movie_id=movie_id))
        self.movie_id = movie_id
        self.user_id = user_id
