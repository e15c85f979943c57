from collections.abc import Awaitable, Callable
import uuid

from api_helpers import PASSWORD, ApiUser, login
from httpx import AsyncClient
import pytest
from starlette import status


@pytest.fixture
def signup(client: AsyncClient) -> Callable[..., Awaitable[ApiUser]]:
    """Registers a user through the API and logs them in."""

    async def _signup(username: str = "alice", password: str = PASSWORD) -> ApiUser:
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "first_name": username.capitalize(),
            "last_name": "Tester",
        }
        response = await client.post("/api/v1/auth/register", json=payload)
        assert response.status_code == status.HTTP_201_CREATED, response.text
        tokens = await login(client, username, password)
        return ApiUser(
            id=uuid.UUID(response.json()["id"]),
            username=username,
            access_token=tokens["access_token"],
            refresh_token=tokens["refresh_token"],
        )

    return _signup


@pytest.fixture
def add_movie(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    async def _add_movie(owner: ApiUser, title: str = "Inception", year: int = 2010, plot: str | None = None) -> dict:
        response = await client.post(
            "/api/v1/movies",
            json={"title": title, "year_of_release": year, "plot": plot},
            headers=owner.headers,
        )
        assert response.status_code == status.HTTP_201_CREATED, response.text
        return response.json()

    return _add_movie


@pytest.fixture
def rate(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    async def _rate(user: ApiUser, movie_id: str, score: int, review: str | None = None) -> dict:
        response = await client.post(
            "/api/v1/ratings",
            json={"movie_id": movie_id, "rating": score, "review": review},
            headers=user.headers,
        )
        assert response.status_code == status.HTTP_201_CREATED, response.text
        return response.json()

    return _rate
