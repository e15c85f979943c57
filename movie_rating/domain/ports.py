"""
Interfaces the services depend on.

Each port has one SQLAlchemy adapter in `movie_rating.db.crud` and one
in-memory double in the tests.
"""

from datetime import datetime
from typing import Protocol
import uuid

from movie_rating.domain.jwt_token import JwtToken, TokenType
from movie_rating.domain.movie import Movie
from movie_rating.domain.movie_rating import MovieRating
from movie_rating.domain.user import User


class UserRepository(Protocol):
    async def save(self, user: User) -> User: ...

    async def find_by_id(self, user_id: uuid.UUID) -> User | None: ...

    async def find_by_username(self, username: str) -> User | None: ...

    async def find_by_email(self, email: str) -> User | None: ...

    async def find_all_active(self) -> list[User]: ...

    async def find_all(self) -> list[User]: ...

    async def update(self, user: User) -> User: ...

    async def delete_by_id(self, user_id: uuid.UUID) -> None: ...

    async def exists_by_username(self, username: str) -> bool: ...

    async def exists_by_email(self, email: str) -> bool: ...

    async def count_active_users(self) -> int: ...

    async def search_by_username_pattern(self, pattern: str) -> list[User]: ...


class MovieRepository(Protocol):
    async def save(self, movie: Movie) -> Movie: ...

    async def find_by_id(self, movie_id: uuid.UUID) -> Movie | None: ...

    async def find_all_active(self) -> list[Movie]: ...

    async def find_by_created_by(self, user_id: uuid.UUID) -> list[Movie]: ...

    async def find_by_title_containing(self, title_pattern: str) -> list[Movie]: ...

    async def find_by_year_of_release(self, year: int) -> list[Movie]: ...

    async def find_by_year_of_release_between(self, start_year: int, end_year: int) -> list[Movie]: ...

    async def find_by_plot_containing(self, keyword: str) -> list[Movie]: ...

    async def exists_by_id(self, movie_id: uuid.UUID) -> bool: ...

    async def exists_by_title_and_year_of_release(self, title: str, year: int) -> bool: ...

    async def delete_by_id(self, movie_id: uuid.UUID, deactivated_by: uuid.UUID | None = None) -> None: ...

    async def count_active(self) -> int: ...

    async def count_by_created_by(self, user_id: uuid.UUID) -> int: ...

    async def count_active_by_created_by(self, user_id: uuid.UUID) -> int: ...

    async def find_all_active_with_pagination(self, offset: int, limit: int) -> list[Movie]: ...

    async def search_movies(
        self, title_pattern: str | None, year: int | None, created_by: uuid.UUID | None
    ) -> list[Movie]: ...


class MovieRatingRepository(Protocol):
    async def save(self, rating: MovieRating) -> MovieRating: ...

    async def find_by_id(self, rating_id: uuid.UUID) -> MovieRating | None: ...

    async def find_active_by_movie_id(self, movie_id: uuid.UUID) -> list[MovieRating]: ...

    async def find_active_by_user_id(self, user_id: uuid.UUID) -> list[MovieRating]: ...

    async def find_active_by_movie_id_and_user_id(
        self, movie_id: uuid.UUID, user_id: uuid.UUID
    ) -> MovieRating | None: ...

    async def find_all_by_movie_id(self, movie_id: uuid.UUID) -> list[MovieRating]: ...

    async def find_all_by_user_id(self, user_id: uuid.UUID) -> list[MovieRating]: ...

    async def find_active_by_movie_id_and_rating_between(
        self, movie_id: uuid.UUID, min_rating: int, max_rating: int
    ) -> list[MovieRating]: ...

    async def find_active_by_movie_id_with_reviews(self, movie_id: uuid.UUID) -> list[MovieRating]: ...

    async def find_active_by_created_at_between(self, start: datetime, end: datetime) -> list[MovieRating]: ...

    async def exists_active_by_movie_id_and_user_id(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool: ...

    async def delete_by_id(self, rating_id: uuid.UUID) -> None: ...

    async def calculate_average_rating_by_movie_id(self, movie_id: uuid.UUID) -> float | None: ...

    async def count_active_by_movie_id(self, movie_id: uuid.UUID) -> int: ...

    async def count_active_by_user_id(self, user_id: uuid.UUID) -> int: ...

    async def find_top_rated_movie_ids(self, limit: int, min_rating_count: int) -> list[uuid.UUID]: ...

    async def find_active_by_movie_id_with_pagination(
        self, movie_id: uuid.UUID, offset: int, limit: int
    ) -> list[MovieRating]: ...

    async def find_active_by_user_id_with_pagination(
        self, user_id: uuid.UUID, offset: int, limit: int
    ) -> list[MovieRating]: ...

    async def find_recent_ratings(self, limit: int) -> list[MovieRating]: ...

    async def find_active_by_rating(self, rating: int) -> list[MovieRating]: ...


class JwtTokenRepository(Protocol):
    async def save(self, token: JwtToken) -> JwtToken: ...

    async def find_by_id(self, token_id: uuid.UUID) -> JwtToken | None: ...

    async def find_by_token_hash(self, token_hash: str) -> JwtToken | None: ...

    async def find_active_tokens_by_user_id(self, user_id: uuid.UUID) -> list[JwtToken]: ...

    async def find_active_tokens_by_user_id_and_type(
        self, user_id: uuid.UUID, token_type: TokenType
    ) -> list[JwtToken]: ...

    async def revoke_by_token_hash(self, token_hash: str, reason: str) -> int: ...

    async def revoke_all_tokens_for_user(self, user_id: uuid.UUID, reason: str) -> int: ...

    async def revoke_all_tokens_for_user_by_type(
        self, user_id: uuid.UUID, token_type: TokenType, reason: str
    ) -> int: ...

    async def is_token_revoked(self, token_hash: str) -> bool: ...

    async def delete_expired_tokens(self, cutoff: datetime) -> int: ...

    async def delete_all_tokens_for_user(self, user_id: uuid.UUID) -> int: ...

    async def count_active_tokens_for_user(self, user_id: uuid.UUID) -> int: ...


class PasswordHashing(Protocol):
    def hash_password(self, password: str) -> str: ...

    def verify_password(self, password: str, password_hash: str) -> bool: ...
