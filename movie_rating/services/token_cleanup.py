import asyncio
from datetime import UTC, datetime, timedelta
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from movie_rating.core.config import settings
from movie_rating.db.crud.jwt_token import SqlAlchemyJwtTokenRepository
from movie_rating.domain.ports import JwtTokenRepository

logger = logging.getLogger(__name__)


async def cleanup_expired_tokens(token_repository: JwtTokenRepository, retention: timedelta) -> int:
    """
    Deletes token records that expired more than `retention` ago.

    :param token_repository: Token repository.
    :param retention: How long expired records are kept.
    :return: Number of deleted records.
    :rtype: int
    """
    cutoff = datetime.now(UTC) - retention
    deleted = await token_repository.delete_expired_tokens(cutoff)
    logger.info("Deleted %s token records expired before %s", deleted, cutoff.isoformat())
    return deleted


async def run_token_cleanup(
    session_maker: async_sessionmaker[AsyncSession],
    interval_seconds: float | None = None,
    retention: timedelta | None = None,
) -> None:
    """
    Periodic cleanup loop, runs until cancelled. A failed round is logged
    and retried on the next tick.

    :param session_maker: Factory of database sessions.
    :param interval_seconds: Pause between rounds.
    :param retention: How long expired records are kept.
    """
    interval_seconds = interval_seconds or settings.TOKEN_CLEANUP_INTERVAL_SECONDS
    retention = retention or timedelta(days=settings.TOKEN_RETENTION_DAYS)
    while True:
        try:
            async with session_maker() as session:
                await cleanup_expired_tokens(SqlAlchemyJwtTokenRepository(session), retention)
                await session.commit()
        except Exception:
            logger.error("Token cleanup round failed", exc_info=True)
        await asyncio.sleep(interval_seconds)
