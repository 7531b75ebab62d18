"""SQLAlchemy unit of work: one session and one transaction per block."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.infrastructure.database.user_repository_db import DbUserRepository


class SqlAlchemyUnitOfWork:
    """Implements UnitOfWork. session.begin() commits on normal exit and rolls back on exception."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[DbUserRepository]:
        async with self._session_factory() as session:
            async with session.begin():
                yield DbUserRepository(session)
