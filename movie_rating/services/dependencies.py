from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from movie_rating.db.crud.jwt_token import SqlAlchemyJwtTokenRepository
from movie_rating.db.crud.movie import SqlAlchemyMovieRepository
from movie_rating.db.crud.movie_rating import SqlAlchemyMovieRatingRepository
from movie_rating.db.crud.user import SqlAlchemyUserRepository
from movie_rating.db.session import get_session
from movie_rating.services.authentication import UserAuthenticationService
from movie_rating.services.movie import ManageMovieService
from movie_rating.services.rating import ManageMovieRatingService
from movie_rating.services.registration import RegisterUserService
from movie_rating.services.security.hash import Argon2PasswordHashingService
from movie_rating.services.security.jwt import JwtTokenService
from movie_rating.services.user import ManageUserProfileService

get_session_ann = Annotated[AsyncSession, Depends(get_session)]

password_hashing = Argon2PasswordHashingService()


def get_user_repository(db: get_session_ann) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(db)


def get_movie_repository(db: get_session_ann) -> SqlAlchemyMovieRepository:
    return SqlAlchemyMovieRepository(db)


def get_rating_repository(db: get_session_ann) -> SqlAlchemyMovieRatingRepository:
    return SqlAlchemyMovieRatingRepository(db)


def get_token_repository(db: get_session_ann) -> SqlAlchemyJwtTokenRepository:
    return SqlAlchemyJwtTokenRepository(db)


user_repository_ann = Annotated[SqlAlchemyUserRepository, Depends(get_user_repository)]
movie_repository_ann = Annotated[SqlAlchemyMovieRepository, Depends(get_movie_repository)]
rating_repository_ann = Annotated[SqlAlchemyMovieRatingRepository, Depends(get_rating_repository)]
token_repository_ann = Annotated[SqlAlchemyJwtTokenRepository, Depends(get_token_repository)]


def get_token_service(token_repository: token_repository_ann) -> JwtTokenService:
    return JwtTokenService(token_repository)


def get_register_user_service(user_repository: user_repository_ann) -> RegisterUserService:
    return RegisterUserService(user_repository, password_hashing)


def get_authentication_service(user_repository: user_repository_ann) -> UserAuthenticationService:
    return UserAuthenticationService(user_repository, password_hashing)


def get_user_profile_service(user_repository: user_repository_ann) -> ManageUserProfileService:
    return ManageUserProfileService(user_repository, password_hashing)


def get_movie_service(movie_repository: movie_repository_ann) -> ManageMovieService:
    return ManageMovieService(movie_repository)


def get_rating_service(
    rating_repository: rating_repository_ann, movie_repository: movie_repository_ann
) -> ManageMovieRatingService:
    return ManageMovieRatingService(rating_repository, movie_repository)


token_service_ann = Annotated[JwtTokenService, Depends(get_token_service)]
register_user_service_ann = Annotated[RegisterUserService, Depends(get_register_user_service)]
authentication_service_ann = Annotated[UserAuthenticationService, Depends(get_authentication_service)]
user_profile_service_ann = Annotated[ManageUserProfileService, Depends(get_user_profile_service)]
movie_service_ann = Annotated[ManageMovieService, Depends(get_movie_service)]
rating_service_ann = Annotated[ManageMovieRatingService, Depends(get_rating_service)]
