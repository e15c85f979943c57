from collections.abc import Callable
from datetime import timedelta

from fakes import FakePasswordHashing, InMemoryJwtTokenRepository, InMemoryUserRepository
from freezegun import freeze_time
import pytest
import pytest_asyncio

from movie_rating.domain.jwt_token import TokenType
from movie_rating.domain.user import User
from movie_rating.exceptions.auth import AuthenticationFailedException, InvalidTokenException
from movie_rating.exceptions.user import UserAccountInactiveException, UserNotFoundException
from movie_rating.services.auth import AuthService, get_current_user
from movie_rating.services.authentication import UserAuthenticationService
from movie_rating.services.security.jwt import JwtTokenService, hash_token


@pytest.fixture
def token_service(token_repository: InMemoryJwtTokenRepository) -> JwtTokenService:
    return JwtTokenService(token_repository)


@pytest.fixture
def auth(
    user_repository: InMemoryUserRepository,
    password_hashing: FakePasswordHashing,
    token_service: JwtTokenService,
) -> AuthService:
    return AuthService(UserAuthenticationService(user_repository, password_hashing), token_service, user_repository)


@pytest_asyncio.fixture
async def alice(user_repository: InMemoryUserRepository, make_user: Callable[..., User]) -> User:
    return await user_repository.save(make_user("alice", "Secret123!"))


######################### TESTS login ########################


@pytest.mark.asyncio
async def test_login_issues_token_pair(
    auth: AuthService, token_service: JwtTokenService, token_repository: InMemoryJwtTokenRepository, alice: User
) -> None:
    tokens = await auth.login("alice@example.com", "Secret123!")

    access = token_service.validate_token(tokens.access_token)
    refresh = token_service.validate_token(tokens.refresh_token)
    assert access.user_id == refresh.user_id == alice.id
    assert access.custom_claims["token_type"] == "access"
    assert refresh.custom_claims["token_type"] == "refresh"
    assert refresh.expires_at - refresh.issued_at == timedelta(days=7)
    assert access.expires_at - access.issued_at == timedelta(minutes=60)
    assert tokens.token_type == "bearer"

    record = await token_repository.find_by_token_hash(hash_token(tokens.refresh_token))
    assert record is not None and record.token_type == TokenType.REFRESH


@pytest.mark.asyncio
async def test_login_touches_user(auth: AuthService, user_repository: InMemoryUserRepository, alice: User) -> None:
    with freeze_time("2031-05-05"):
        await auth.login("alice", "Secret123!")

    assert (await user_repository.find_by_id(alice.id)).updated_at.year == 2031


@pytest.mark.asyncio
@pytest.mark.parametrize(("login", "password"), [("alice", "wrong"), ("nobody", "Secret123!"), ("", "")])
async def test_login_bad_credentials(auth: AuthService, alice: User, login: str, password: str) -> None:
    with pytest.raises(AuthenticationFailedException) as exc:
        await auth.login(login, password)

    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user(auth: AuthService, user_repository: InMemoryUserRepository, alice: User) -> None:
    await user_repository.save(alice.deactivate())

    with pytest.raises(UserAccountInactiveException):
        await auth.login("alice", "Secret123!")


######################### TESTS refresh ########################


@pytest.mark.asyncio
async def test_refresh_success(auth: AuthService, token_service: JwtTokenService, alice: User) -> None:
    tokens = await auth.login("alice", "Secret123!")

    new_access = await auth.refresh(tokens.refresh_token)

    claims = await token_service.validate_token_with_blacklist(new_access.access_token)
    assert claims.user_id == alice.id
    assert claims.custom_claims["token_type"] == "access"


@pytest.mark.asyncio
async def test_refresh_with_access_token(auth: AuthService, alice: User) -> None:
    tokens = await auth.login("alice", "Secret123!")

    with pytest.raises(InvalidTokenException) as exc:
        await auth.refresh(tokens.access_token)

    assert exc.value.detail == "Token is not a refresh token"


@pytest.mark.asyncio
async def test_refresh_revoked_token(auth: AuthService, alice: User) -> None:
    tokens = await auth.login("alice", "Secret123!")
    await auth.logout(tokens.access_token, tokens.refresh_token)

    with pytest.raises(InvalidTokenException):
        await auth.refresh(tokens.refresh_token)


@pytest.mark.asyncio
async def test_refresh_inactive_user(auth: AuthService, user_repository: InMemoryUserRepository, alice: User) -> None:
    tokens = await auth.login("alice", "Secret123!")
    await user_repository.save(alice.deactivate())

    with pytest.raises(UserAccountInactiveException):
        await auth.refresh(tokens.refresh_token)


@pytest.mark.asyncio
async def test_refresh_deleted_user(auth: AuthService, user_repository: InMemoryUserRepository, alice: User) -> None:
    tokens = await auth.login("alice", "Secret123!")
    user_repository.users.clear()

    with pytest.raises(UserNotFoundException):
        await auth.refresh(tokens.refresh_token)


######################### TESTS logout ########################


@pytest.mark.asyncio
async def test_logout_revokes_access_token(auth: AuthService, token_service: JwtTokenService, alice: User) -> None:
    tokens = await auth.login("alice", "Secret123!")

    response = await auth.logout(tokens.access_token)

    assert response.msg == "Logged out successfully"
    with pytest.raises(InvalidTokenException):
        await token_service.validate_token_with_blacklist(tokens.access_token)
    await token_service.validate_token_with_blacklist(tokens.refresh_token)


@pytest.mark.asyncio
async def test_logout_unknown_token_succeeds(auth: AuthService) -> None:
    response = await auth.logout("not-a-token")

    assert response.msg == "Logged out successfully"


######################### TESTS get_current_user ########################


@pytest.mark.asyncio
async def test_get_current_user(auth: AuthService, token_service: JwtTokenService, alice: User) -> None:
    tokens = await auth.login("alice", "Secret123!")

    claims = await get_current_user(tokens.access_token, token_service)

    assert claims.user_id == alice.id
    assert claims.username == "alice"


@pytest.mark.asyncio
async def test_get_current_user_rejects_refresh_token(
    auth: AuthService, token_service: JwtTokenService, alice: User
) -> None:
    tokens = await auth.login("alice", "Secret123!")

    with pytest.raises(InvalidTokenException):
        await get_current_user(tokens.refresh_token, token_service)
