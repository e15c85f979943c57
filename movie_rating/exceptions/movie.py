import uuid

from starlette.status import HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from movie_rating.exceptions.base import AppHTTPException


class MovieNotFoundException(AppHTTPException):
    """No movie with the requested id."""

    status_code = HTTP_404_NOT_FOUND
    detail = "Movie with id {movie_id} not found"
    example = {"detail": "Movie with id 3fa85f64-5717-4562-b3fc-2c963f66afa6 not found"}

    def __init__(self, movie_id: uuid.UUID) -> None:
        """
        :param movie_id: ID of the missing movie.
        """
        super().__init__(detail=self.detail.format(movie_id=movie_id))
        self.movie_id = movie_id


class DuplicateMovieException(AppHTTPException):
    """An active movie with the same title and year already exists."""

    status_code = HTTP_409_CONFLICT
    detail = "Movie '{title}' ({year}) already exists"
    example = {"detail": "Movie 'Inception' (2010) already exists"}

    def __init__(self, title: str, year: int) -> None:
        """
        :param title: Movie title.
        :param year: Year of release.
        """
        super().__init__(detail=self.detail.format(title=title, year=year))
        self.title = title
        self.year = year


class UnauthorizedMovieOperationException(AppHTTPException):
    """Only the creator of a movie or rating may change it."""

    status_code = HTTP_403_FORBIDDEN
    detail = "User {user_id} is not authorized to {operation} movie {movie_id}"
    example = {
        "detail": "User 3fa85f64-5717-4562-b3fc-2c963f66afa6 is not authorized to update "
        "movie 9c1f0e5a-1d2b-4c3d-8e4f-5a6b7c8d9e0f"
    }

    def __init__(self, movie_id: uuid.UUID, user_id: uuid.UUID, operation: str) -> None:
        """
        :param movie_id: ID of the movie the operation targets.
        :param user_id: ID of the caller.
        :param operation: Name of the rejected operation.
        """
        super().__init__(detail=self.detail.format(user_id=user_id, operation=operation, movie_id=movie_id))
        self.movie_id = movie_id
        self.user_id = user_id
        self.operation = operation
