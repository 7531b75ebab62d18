"""DB-backed user repository. Runs inside the session/transaction owned by the unit of work."""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.user import User
from app.infrastructure.database.models import UserRow


def _to_domain(row: UserRow) -> User:
    return User(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        nickname=row.nickname,
        created_at=row.created_at,
        updated_at=row.updated_at,
        is_deleted=bool(row.is_deleted),
    )


class DbUserRepository:
    """Implements UserRepository protocol. Never commits; the unit of work does."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists_active_username(self, username: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(UserRow)
            .where(UserRow.username == username, UserRow.is_deleted == False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def add(self, username: str, password_hash: str, nickname: Optional[str]) -> User:
        row = UserRow(
            username=username,
            password_hash=password_hash,
            nickname=nickname,
            is_deleted=False,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return _to_domain(row)

    async def get_active(self, user_id: int) -> Optional[User]:
        stmt = select(UserRow).where(UserRow.id == user_id, UserRow.is_deleted == False)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_domain(row) if row is not None else None

    async def save(self, user: User) -> User:
        row = await self._session.get(UserRow, user.id)
        if row is None:
            raise LookupError(f"user {user.id} vanished inside its own transaction")
        row.nickname = user.nickname
        row.password_hash = user.password_hash
        row.is_deleted = user.is_deleted
        await self._session.flush()
        await self._session.refresh(row)
        return _to_domain(row)

    async def list_active(self, offset: int, limit: int) -> List[User]:
        stmt = (
            select(UserRow)
            .where(UserRow.is_deleted == False)
            .order_by(UserRow.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [_to_domain(row) for row in result.scalars().all()]

    async def count_active(self) -> int:
        stmt = select(func.count()).select_from(UserRow).where(UserRow.is_deleted == False)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())
