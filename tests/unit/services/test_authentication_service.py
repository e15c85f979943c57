from collections.abc import Callable
import uuid

from fakes import FakePasswordHashing, InMemoryUserRepository
from freezegun import freeze_time
import pytest
import pytest_asyncio

from movie_rating.domain.commands import AuthenticationCommand
from movie_rating.domain.user import User
from movie_rating.exceptions.auth import AuthenticationFailedException
from movie_rating.exceptions.user import UserAccountInactiveException, UserNotFoundException
from movie_rating.services.authentication import UserAuthenticationService


@pytest.fixture
def service(
    user_repository: InMemoryUserRepository, password_hashing: FakePasswordHashing
) -> UserAuthenticationService:
    return UserAuthenticationService(user_repository, password_hashing)


@pytest_asyncio.fixture
async def alice(user_repository: InMemoryUserRepository, make_user: Callable[..., User]) -> User:
    return await user_repository.save(make_user("alice", "Secret123!"))


######################### TESTS authenticate ########################


@pytest.mark.asyncio
@pytest.mark.parametrize("login", ["alice", "alice@example.com", "ALICE@Example.com", "  alice  "])
async def test_authenticate_success(service: UserAuthenticationService, alice: User, login: str) -> None:
    user = await service.authenticate(AuthenticationCommand(username_or_email=login, password="Secret123!"))

    assert user.id == alice.id


@pytest.mark.asyncio
async def test_authenticate_unknown_user(service: UserAuthenticationService, alice: User) -> None:
    with pytest.raises(UserNotFoundException):
        await service.authenticate(AuthenticationCommand(username_or_email="bob", password="Secret123!"))


@pytest.mark.asyncio
async def test_authenticate_login_with_at_sign_never_matches_username(
    service: UserAuthenticationService, alice: User
) -> None:
    command = AuthenticationCommand(username_or_email="alice@", password="Secret123!")

    assert command.is_email is True
    with pytest.raises(UserNotFoundException):
        await service.authenticate(command)


@pytest.mark.asyncio
async def test_authenticate_wrong_password(service: UserAuthenticationService, alice: User) -> None:
    with pytest.raises(AuthenticationFailedException) as exc:
        await service.authenticate(AuthenticationCommand(username_or_email="alice", password="nope"))

    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_authenticate_inactive_user_checked_before_password(
    service: UserAuthenticationService, user_repository: InMemoryUserRepository, alice: User
) -> None:
    await user_repository.save(alice.deactivate())

    with pytest.raises(UserAccountInactiveException):
        await service.authenticate(AuthenticationCommand(username_or_email="alice", password="wrong"))


######################### TESTS validate_credentials ########################


@pytest.mark.asyncio
async def test_validate_credentials(service: UserAuthenticationService, alice: User) -> None:
    assert await service.validate_credentials("alice", "Secret123!") is True
    assert await service.validate_credentials("alice", "bad") is False
    assert await service.validate_credentials("nobody", "Secret123!") is False
    assert await service.validate_credentials("", "") is False


######################### TESTS update_last_login ########################


@pytest.mark.asyncio
async def test_update_last_login_touches_updated_at(service: UserAuthenticationService, alice: User) -> None:
    with freeze_time("2030-01-01 00:00:00"):
        user = await service.update_last_login(alice.id)

    assert user.updated_at.year == 2030
    assert user.created_at == alice.created_at


@pytest.mark.asyncio
async def test_update_last_login_unknown_user(service: UserAuthenticationService) -> None:
    with pytest.raises(UserNotFoundException):
        await service.update_last_login(uuid.uuid4())
