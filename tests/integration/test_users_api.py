from collections.abc import Awaitable, Callable
import uuid

from api_helpers import PASSWORD, ApiUser
from httpx import AsyncClient
import pytest
from starlette import status

ME_URL = "/api/v1/users/me"


######################### TESTS GET /api/v1/users/me ########################


@pytest.mark.asyncio
async def test_read_me(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")

    response = await client.get(ME_URL, headers=user.headers)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["id"] == str(user.id)
    assert body["username"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["full_name"] == "Alice Tester"


@pytest.mark.asyncio
async def test_read_me_unauthenticated(client: AsyncClient) -> None:
    response = await client.get(ME_URL)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_read_me_with_invalid_token(client: AsyncClient) -> None:
    response = await client.get(ME_URL, headers={"Authorization": "Bearer invalid"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid token"


######################### TESTS PATCH /api/v1/users/me ########################


@pytest.mark.asyncio
async def test_update_me_partial(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")

    response = await client.patch(
        ME_URL, json={"first_name": "Alicia", "email": "Alicia@Example.com"}, headers=user.headers
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["first_name"] == "Alicia"
    assert body["last_name"] == "Tester"
    assert body["email"] == "alicia@example.com"


@pytest.mark.asyncio
async def test_update_me_email_taken(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")
    await signup("bob")

    response = await client.patch(ME_URL, json={"email": "bob@example.com"}, headers=user.headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"] == "Email 'bob@example.com' already exists"


@pytest.mark.asyncio
async def test_update_me_same_email(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")

    response = await client.patch(ME_URL, json={"email": "alice@example.com"}, headers=user.headers)

    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_update_me_blank_name(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")

    response = await client.patch(ME_URL, json={"last_name": "   "}, headers=user.headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
    assert response.json()["errors"]["last_name"] == "Name cannot be empty"


######################### TESTS POST /api/v1/users/me/password ########################


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")
    payload = {"current_password": PASSWORD, "new_password": "NewSecret456", "confirm_password": "NewSecret456"}

    response = await client.post(f"{ME_URL}/password", json=payload, headers=user.headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"msg": "Password updated successfully"}
    old = await client.post("/api/v1/auth/login", data={"username": "alice", "password": PASSWORD})
    new = await client.post("/api/v1/auth/login", data={"username": "alice", "password": "NewSecret456"})
    assert old.status_code == status.HTTP_401_UNAUTHORIZED
    assert new.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_change_password_wrong_current(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")
    payload = {"current_password": "wrong-one", "new_password": "NewSecret456", "confirm_password": "NewSecret456"}

    response = await client.post(f"{ME_URL}/password", json=payload, headers=user.headers)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_change_password_mismatch(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")
    payload = {"current_password": PASSWORD, "new_password": "NewSecret456", "confirm_password": "Different789"}

    response = await client.post(f"{ME_URL}/password", json=payload, headers=user.headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT


######################### TESTS POST /api/v1/users/me/deactivate ########################


@pytest.mark.asyncio
async def test_deactivate_me_revokes_tokens(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    user = await signup("alice")

    response = await client.post(f"{ME_URL}/deactivate", headers=user.headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"msg": "Account deactivated"}
    me = await client.get(ME_URL, headers=user.headers)
    assert me.status_code == status.HTTP_401_UNAUTHORIZED
    refreshed = await client.post("/api/v1/auth/refresh", json={"refresh_token": user.refresh_token})
    assert refreshed.status_code == status.HTTP_401_UNAUTHORIZED


######################### TESTS GET /api/v1/users ########################


@pytest.mark.asyncio
async def test_list_users(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    alice = await signup("alice")
    bob = await signup("bob")
    await client.post(f"{ME_URL}/deactivate", headers=bob.headers)

    active = await client.get("/api/v1/users", headers=alice.headers)
    searched = await client.get("/api/v1/users", params={"username": "BO"}, headers=alice.headers)

    assert [u["username"] for u in active.json()] == ["alice"]
    assert [(u["username"], u["is_active"]) for u in searched.json()] == [("bob", False)]


@pytest.mark.asyncio
async def test_list_users_unauthenticated(client: AsyncClient) -> None:
    response = await client.get("/api/v1/users")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


######################### TESTS GET /api/v1/users/{user_id} ########################


@pytest.mark.asyncio
async def test_read_user(client: AsyncClient, signup: Callable[..., Awaitable[ApiUser]]) -> None:
    alice = await signup("alice")
    bob = await signup("bob")

    found = await client.get(f"/api/v1/users/{bob.id}", headers=alice.headers)
    missing = await client.get(f"/api/v1/users/{uuid.uuid4()}", headers=alice.headers)

    assert found.status_code == status.HTTP_200_OK
    assert found.json()["username"] == "bob"
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json()["detail"] == "User is not found"
