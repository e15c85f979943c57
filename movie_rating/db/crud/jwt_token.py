from datetime import UTC, datetime
from typing import Any
import uuid

from sqlalchemy import delete, exists, func, select, update

from movie_rating.db.crud.base import SqlAlchemyRepository, as_utc
from movie_rating.db.model import JwtToken as JwtTokenRow
from movie_rating.domain.jwt_token import JwtToken, TokenType


def _to_domain(row: JwtTokenRow) -> JwtToken:
    return JwtToken(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        token_type=TokenType(row.token_type),
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        is_revoked=row.is_revoked,
        revoked_at=as_utc(row.revoked_at),
        revoked_reason=row.revoked_reason,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _to_values(token: JwtToken) -> dict[str, Any]:
    return {
        "user_id": token.user_id,
        "token_hash": token.token_hash,
        "token_type": token.token_type.value,
        "issued_at": token.issued_at,
        "expires_at": token.expires_at,
        "is_revoked": token.is_revoked,
        "revoked_at": token.revoked_at,
        "revoked_reason": token.revoked_reason,
        "created_at": token.created_at,
        "updated_at": token.updated_at,
    }


_not_revoked = JwtTokenRow.is_revoked.is_(False)


class SqlAlchemyJwtTokenRepository(SqlAlchemyRepository):
    """Issued tokens table adapter."""

    async def save(self, token: JwtToken) -> JwtToken:
        return _to_domain(await self._upsert(JwtTokenRow, token.id, _to_values(token)))

    async def find_by_id(self, token_id: uuid.UUID) -> JwtToken | None:
        row = await self._one_or_none(select(JwtTokenRow).where(JwtTokenRow.id == token_id))
        return _to_domain(row) if row else None

    async def find_by_token_hash(self, token_hash: str) -> JwtToken | None:
        row = await self._one_or_none(select(JwtTokenRow).where(JwtTokenRow.token_hash == token_hash))
        return _to_domain(row) if row else None

    async def find_active_tokens_by_user_id(self, user_id: uuid.UUID) -> list[JwtToken]:
        """Tokens that are neither revoked nor expired."""
        query = select(JwtTokenRow).where(
            JwtTokenRow.user_id == user_id, _not_revoked, JwtTokenRow.expires_at > datetime.now(UTC)
        )
        return [_to_domain(row) for row in await self._all(query)]

    async def find_active_tokens_by_user_id_and_type(
        self, user_id: uuid.UUID, token_type: TokenType
    ) -> list[JwtToken]:
        query = select(JwtTokenRow).where(
            JwtTokenRow.user_id == user_id,
            JwtTokenRow.token_type == token_type.value,
            _not_revoked,
            JwtTokenRow.expires_at > datetime.now(UTC),
        )
        return [_to_domain(row) for row in await self._all(query)]

    async def _revoke(self, reason: str, *criteria: Any) -> int:
        now = datetime.now(UTC)
        result = await self._execute(
            update(JwtTokenRow)
            .where(_not_revoked, *criteria)
            .values(is_revoked=True, revoked_at=now, revoked_reason=reason, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def revoke_by_token_hash(self, token_hash: str, reason: str) -> int:
        """
        Revokes the token with the given hash.

        :param token_hash: SHA-256 hex digest of the token.
        :param reason: Stored revocation reason.
        :return: Number of revoked records, 0 if unknown or already revoked.
        :rtype: int
        """
        return await self._revoke(reason, JwtTokenRow.token_hash == token_hash)

    async def revoke_all_tokens_for_user(self, user_id: uuid.UUID, reason: str) -> int:
        return await self._revoke(reason, JwtTokenRow.user_id == user_id)

    async def revoke_all_tokens_for_user_by_type(
        self, user_id: uuid.UUID, token_type: TokenType, reason: str
    ) -> int:
        return await self._revoke(reason, JwtTokenRow.user_id == user_id, JwtTokenRow.token_type == token_type.value)

    async def is_token_revoked(self, token_hash: str) -> bool:
        query = select(exists().where(JwtTokenRow.token_hash == token_hash, JwtTokenRow.is_revoked.is_(True)))
        return bool(await self._scalar(query))

    async def delete_expired_tokens(self, cutoff: datetime) -> int:
        """
        Physically removes tokens that expired before the cutoff.

        :param cutoff: Expiry bound.
        :return: Number of deleted records.
        :rtype: int
        """
        result = await self._execute(
            delete(JwtTokenRow).where(JwtTokenRow.expires_at < cutoff).execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_all_tokens_for_user(self, user_id: uuid.UUID) -> int:
        result = await self._execute(
            delete(JwtTokenRow)
            .where(JwtTokenRow.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def count_active_tokens_for_user(self, user_id: uuid.UUID) -> int:
        query = (
            select(func.count())
            .select_from(JwtTokenRow)
            .where(JwtTokenRow.user_id == user_id, _not_revoked, JwtTokenRow.expires_at > datetime.now(UTC))
        )
        return await self._scalar(query)
