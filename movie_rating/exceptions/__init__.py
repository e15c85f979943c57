from .auth import AuthenticationFailedException, InvalidPasswordException, InvalidTokenException
from .base import AppHTTPException
from .movie import DuplicateMovieException, MovieNotFoundException, UnauthorizedMovieOperationException
from .rating import DuplicateRatingException, MovieRatingNotFoundException
from .user import (
    EmailAlreadyExistsException,
    UserAccountInactiveException,
    UserCreationException,
    UserNotFoundException,
    UsernameAlreadyExistsException,
)
from .validation import ValidationException
