from .base import Base
from .jwt_token import JwtToken
from .movie import Movie
from .movie_rating import MovieRating
from .user import User

__all__ = ["Base", "JwtToken", "Movie", "MovieRating", "User"]
