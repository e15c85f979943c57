from collections.abc import Iterable
from datetime import datetime
import uuid

from pydantic import BaseModel, ConfigDict

from movie_rating.domain.movie_rating import MovieRating


class RatingDistribution(BaseModel):
    """
    Number of ratings per score on the 1-10 scale.

    :cvar int rating_1: Ratings with score 1. Fields up to rating_10 follow the same rule.
    """

    model_config = ConfigDict(frozen=True)

    rating_1: int = 0
    rating_2: int = 0
    rating_3: int = 0
    rating_4: int = 0
    rating_5: int = 0
    rating_6: int = 0
    rating_7: int = 0
    rating_8: int = 0
    rating_9: int = 0
    rating_10: int = 0

    @classmethod
    def from_ratings(cls, ratings: Iterable[MovieRating]) -> "RatingDistribution":
        buckets: dict[str, int] = {}
        for rating in ratings:
            key = f"rating_{rating.rating}"
            buckets[key] = buckets.get(key, 0) + 1
        return cls(**buckets)

    @property
    def total(self) -> int:
        return sum(self.model_dump().values())


class MovieRatingStatistics(BaseModel):
    """
    Aggregates over the active ratings of one movie.

    :cvar uuid.UUID movie_id: Movie ID.
    :cvar int total_ratings: Number of active ratings.
    :cvar float average_rating: Mean score, 0.0 without ratings.
    :cvar int min_rating: Lowest score, 0 without ratings.
    :cvar int max_rating: Highest score, 0 without ratings.
    :cvar int ratings_with_reviews: Ratings with a non-blank review.
    :cvar RatingDistribution distribution: Count per score.
    """

    model_config = ConfigDict(frozen=True)

    movie_id: uuid.UUID
    total_ratings: int
    average_rating: float
    min_rating: int
    max_rating: int
    ratings_with_reviews: int
    distribution: RatingDistribution


class UserRatingStatistics(BaseModel):
    """
    Aggregates over the active ratings given by one user.

    :cvar uuid.UUID user_id: User ID.
    :cvar int total_ratings: Number of active ratings.
    :cvar float average_rating_given: Mean score given.
    :cvar int min_rating: Lowest score given.
    :cvar int max_rating: Highest score given.
    :cvar int ratings_with_reviews: Ratings with a non-blank review.
    :cvar datetime | None first_rating_date: Oldest rating time.
    :cvar datetime | None last_rating_date: Newest rating time.
    """

    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    total_ratings: int
    average_rating_given: float
    min_rating: int
    max_rating: int
    ratings_with_reviews: int
    first_rating_date: datetime | None = None
    last_rating_date: datetime | None = None


class TopRatedMovie(BaseModel):
    """
    :cvar uuid.UUID movie_id: Movie ID.
    :cvar float average_rating: Mean active score.
    :cvar int total_ratings: Number of active ratings.
    """

    model_config = ConfigDict(frozen=True)

    movie_id: uuid.UUID
    average_rating: float
    total_ratings: int


class UserMovieStatistics(BaseModel):
    """
    Movies created by one user.

    :cvar int total_movies: All created movies.
    :cvar int active_movies: Created movies that are still active.
    :cvar int deactivated_movies: The difference of the two.
    """

    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    total_movies: int
    active_movies: int
    deactivated_movies: int
