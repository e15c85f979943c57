import asyncio
from datetime import UTC, datetime
from typing import Any
import uuid

from sqlalchemy import Executable, Result
from sqlalchemy.ext.asyncio import AsyncSession

from movie_rating.db.model import Base

SESSION_LOCK_KEY = "movie_rating.statement_lock"


def as_utc(value: datetime | None) -> datetime | None:
    """
    Attaches UTC to datetimes read back without a timezone.

    :param value: Datetime from a row.
    :return: Timezone-aware datetime or None.
    :rtype: datetime | None
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class SqlAlchemyRepository:
    """
    Common plumbing of the repository adapters.

    All adapters built on one session share a lock, so services may run
    several repository calls concurrently on the same session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._lock: asyncio.Lock = db.info.setdefault(SESSION_LOCK_KEY, asyncio.Lock())

    async def _execute(self, statement: Executable) -> Result[Any]:
        async with self._lock:
            return await self.db.execute(statement)

    async def _all(self, statement: Executable) -> list[Any]:
        return list((await self._execute(statement)).scalars().all())

    async def _one_or_none(self, statement: Executable) -> Any | None:
        return (await self._execute(statement)).scalar_one_or_none()

    async def _scalar(self, statement: Executable) -> Any:
        return (await self._execute(statement)).scalar()

    async def _upsert(self, model: type[Base], entity_id: uuid.UUID, values: dict[str, Any]) -> Any:
        """
        Inserts the row or overwrites the stored one with the same ID.

        :param model: Table model.
        :param entity_id: Primary key.
        :param values: Column values.
        :return: Flushed row.
        """
        async with self._lock:
            row = await self.db.get(model, entity_id)
            if row is None:
                row = model(id=entity_id)
                self.db.add(row)
            for column, value in values.items():
                setattr(row, column, value)
            await self.db.flush()
            return row
