import os
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parent.parent))

os.environ["ENVIRONMENT"] = "test"
os.environ["TEST_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")

from collections.abc import AsyncGenerator
import uuid

from httpx import ASGITransport, AsyncClient
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fakes import (
    FakePasswordHashing,
    InMemoryJwtTokenRepository,
    InMemoryMovieRatingRepository,
    InMemoryMovieRepository,
    InMemoryUserRepository,
)
from movie_rating.db.model import Base
from movie_rating.db.session import get_session
from movie_rating.domain.movie import Movie
from movie_rating.domain.user import User
from movie_rating.main import app


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Creates a fresh in-memory database with all tables for one test.

    :return: Asynchronous engine.
    :rtype: AsyncGenerator[AsyncEngine, None]
    """
    engine = create_async_engine(
        os.environ["TEST_DATABASE_URL"],
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for repository tests; nothing is committed.

    :return: Asynchronous database session.
    :rtype: AsyncGenerator[AsyncSession, None]
    """
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client whose requests run against the per-test database.

    Every request gets its own committed session, like in production.

    :param session_maker: Session factory bound to the test engine.
    :returns: Asynchronous FastAPI client.
    :rtype: AsyncGenerator[AsyncClient, None]
    """

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    original_overrides = app.dependency_overrides.copy()
    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as client:
        yield client

    app.dependency_overrides = original_overrides


@pytest.fixture
def password_hashing() -> FakePasswordHashing:
    return FakePasswordHashing()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def movie_repository() -> InMemoryMovieRepository:
    return InMemoryMovieRepository()


@pytest.fixture
def rating_repository() -> InMemoryMovieRatingRepository:
    return InMemoryMovieRatingRepository()


@pytest.fixture
def token_repository() -> InMemoryJwtTokenRepository:
    return InMemoryJwtTokenRepository()


@pytest.fixture
def make_user(password_hashing: FakePasswordHashing):  # noqa: ANN201
    """Factory of valid users; the password is stored with the fake hasher."""

    def _make_user(username: str = "alice", password: str = "Secret123!", **overrides) -> User:  # noqa: ANN003
        data = {
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": password_hashing.hash_password(password),
            "first_name": "Alice",
            "last_name": "Smith",
        }
        data.update(overrides)
        return User.build(**data)

    return _make_user


@pytest.fixture
def make_movie():  # noqa: ANN201
    """Factory of valid movies."""

    def _make_movie(title: str = "Inception", year: int = 2010, created_by: uuid.UUID | None = None, **overrides):  # noqa: ANN003, ANN202
        return Movie.build(
            title=title,
            year_of_release=year,
            created_by=created_by or uuid.uuid4(),
            plot=overrides.pop("plot", "A thief who steals corporate secrets through dreams."),
            **overrides,
        )

    return _make_movie
