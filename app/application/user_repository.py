"""User repository protocol. Application layer depends on this; infrastructure implements it."""

from typing import List, Optional, Protocol

from app.domain.models.user import User


class UserRepository(Protocol):
    """Persistence for users inside one unit of work. Soft-deleted users are never returned."""

    async def exists_active_username(self, username: str) -> bool:
        """True if a live (not soft-deleted) user has this username."""
        ...

    async def add(self, username: str, password_hash: str, nickname: Optional[str]) -> User:
        """Insert a new user and return it with its generated id and timestamps."""
        ...

    async def get_active(self, user_id: int) -> Optional[User]:
        ...

    async def save(self, user: User) -> User:
        """Write nickname, password_hash and is_deleted of an existing user."""
        ...

    async def list_active(self, offset: int, limit: int) -> List[User]:
        ...

    async def count_active(self) -> int:
        ...
