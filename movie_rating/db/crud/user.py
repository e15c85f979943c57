from datetime import UTC, datetime
from typing import Any
import uuid

from sqlalchemy import exists, func, select, update

from movie_rating.db.crud.base import SqlAlchemyRepository, as_utc
from movie_rating.db.model import User as UserRow
from movie_rating.domain.lifecycle import lifecycle_from_columns
from movie_rating.domain.user import User


def _to_domain(row: UserRow) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        lifecycle=lifecycle_from_columns(row.is_active, as_utc(row.deactivated_at)),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _to_values(user: User) -> dict[str, Any]:
    return {
        "username": user.username,
        "email": user.email,
        "password_hash": user.password_hash,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "is_active": user.is_active,
        "deactivated_at": user.deactivated_at,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class SqlAlchemyUserRepository(SqlAlchemyRepository):
    """Users table adapter."""

    async def save(self, user: User) -> User:
        """
        Inserts or overwrites the user.

        :param user: User to store.
        :return: Stored user.
        :rtype: User
        :raises IntegrityError: If the username or email is taken.
        """
        return _to_domain(await self._upsert(UserRow, user.id, _to_values(user)))

    async def update(self, user: User) -> User:
        return await self.save(user)

    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        row = await self._one_or_none(select(UserRow).where(UserRow.id == user_id))
        return _to_domain(row) if row else None

    async def find_by_username(self, username: str) -> User | None:
        row = await self._one_or_none(select(UserRow).where(UserRow.username == username))
        return _to_domain(row) if row else None

    async def find_by_email(self, email: str) -> User | None:
        row = await self._one_or_none(select(UserRow).where(UserRow.email == email))
        return _to_domain(row) if row else None

    async def find_all_active(self) -> list[User]:
        query = select(UserRow).where(UserRow.is_active.is_(True)).order_by(UserRow.username)
        return [_to_domain(row) for row in await self._all(query)]

    async def find_all(self) -> list[User]:
        return [_to_domain(row) for row in await self._all(select(UserRow).order_by(UserRow.username))]

    async def delete_by_id(self, user_id: uuid.UUID) -> None:
        """Deactivates the user; accounts are never removed."""
        now = datetime.now(UTC)
        await self._execute(
            update(UserRow)
            .where(UserRow.id == user_id, UserRow.is_active.is_(True))
            .values(is_active=False, deactivated_at=now, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )

    async def exists_by_username(self, username: str) -> bool:
        return bool(await self._scalar(select(exists().where(UserRow.username == username))))

    async def exists_by_email(self, email: str) -> bool:
        return bool(await self._scalar(select(exists().where(UserRow.email == email))))

    async def count_active_users(self) -> int:
        return await self._scalar(select(func.count()).select_from(UserRow).where(UserRow.is_active.is_(True)))

    async def search_by_username_pattern(self, pattern: str) -> list[User]:
        query = (
            select(UserRow)
            .where(UserRow.username.icontains(pattern, autoescape=True))
            .order_by(UserRow.username)
        )
        return [_to_domain(row) for row in await self._all(query)]
