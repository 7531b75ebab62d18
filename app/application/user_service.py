"""User application service: guarded mutations over lock, unit of work and hasher."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from app.application.exceptions import (
    DependencyUnavailableError,
    ResourceBusyError,
    UsernameTakenError,
    UserNotFoundError,
)
from app.application.unit_of_work import UnitOfWork
from app.domain.schemas.user import (
    RegisterRequest,
    UpdateUserRequest,
    UserListResponse,
    UserResponse,
)
from app.locking import (
    DistributedLock,
    LockContentionError,
    LockTimeoutError,
    RetryPolicy,
    StoreUnavailableError,
    resource_key,
    with_lock,
)
from app.security.passwords import PasswordHasher

T = TypeVar("T")

REGISTER_LOCK_DOMAIN = "register"
UPDATE_USER_LOCK_DOMAIN = "update:user"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def register_lock_key(username: str) -> str:
    return resource_key(REGISTER_LOCK_DOMAIN, username)


def update_user_lock_key(user_id: int) -> str:
    return resource_key(UPDATE_USER_LOCK_DOMAIN, user_id)


class UserService:
    """
    Application-layer orchestration only. No HTTP, no FastAPI.

    Mutations run as lock -> transaction -> check/read -> write -> commit -> release.
    The lock removes the check-then-write race across instances; the transaction
    keeps the check and the write atomic against concurrent readers.
    """

    def __init__(
        self,
        lock: DistributedLock,
        unit_of_work: UnitOfWork,
        hasher: PasswordHasher,
        logger: logging.Logger,
        *,
        lock_ttl: float = 10.0,
        retry: RetryPolicy = RetryPolicy(max_attempts=3, delay=0.1),
        acquire_timeout: Optional[float] = None,
    ) -> None:
        self._lock = lock
        self._unit_of_work = unit_of_work
        self._hasher = hasher
        self._logger = logger
        self._lock_ttl = lock_ttl
        self._retry = retry
        self._acquire_timeout = acquire_timeout

    async def _guarded(self, key: str, critical_section: Callable[[], Awaitable[T]]) -> T:
        """Run critical_section under key; translate lock failures to application errors."""
        try:
            return await with_lock(
                self._lock,
                key,
                self._lock_ttl,
                critical_section,
                retry=self._retry,
                timeout=self._acquire_timeout,
            )
        except (LockContentionError, LockTimeoutError) as e:
            self._logger.info(
                "resource_busy",
                extra={"lock_key": self._lock.full_key(key), "error": e.message},
            )
            raise ResourceBusyError("Resource is busy, please retry later") from e
        except StoreUnavailableError as e:
            self._logger.error(
                "lock_store_unavailable",
                extra={"lock_key": self._lock.full_key(key), "error": e.message},
            )
            raise DependencyUnavailableError("Service temporarily unavailable") from e

    async def register(self, request: RegisterRequest) -> UserResponse:
        """
        Create-if-absent keyed by username. Raises UsernameTakenError if a live user
        already has it, ResourceBusyError if another registration holds the lock.
        """
        # Hash outside the lock: it is slow and needs no exclusion.
        password_hash = await asyncio.to_thread(self._hasher.hash, request.password)

        async def create() -> UserResponse:
            async with self._unit_of_work() as users:
                if await users.exists_active_username(request.username):
                    raise UsernameTakenError("Username already exists")
                user = await users.add(request.username, password_hash, request.nickname)
            return UserResponse.from_user(user)

        response = await self._guarded(register_lock_key(request.username), create)
        self._logger.info("user_registered", extra={"user_id": response.id})
        return response

    async def update_user(self, user_id: int, request: UpdateUserRequest) -> UserResponse:
        """Read-modify-write keyed by user id. Empty fields are left unchanged."""
        password_hash = None
        if request.password:
            password_hash = await asyncio.to_thread(self._hasher.hash, request.password)

        async def modify() -> UserResponse:
            async with self._unit_of_work() as users:
                user = await users.get_active(user_id)
                if user is None:
                    raise UserNotFoundError("User not found")
                if request.nickname:
                    user.nickname = request.nickname
                if password_hash is not None:
                    user.password_hash = password_hash
                user = await users.save(user)
            return UserResponse.from_user(user)

        response = await self._guarded(update_user_lock_key(user_id), modify)
        self._logger.info("user_updated", extra={"user_id": user_id})
        return response

    async def delete_user(self, user_id: int) -> None:
        """Soft delete. Shares the update lock so it cannot interleave with an update."""

        async def soft_delete() -> None:
            async with self._unit_of_work() as users:
                user = await users.get_active(user_id)
                if user is None:
                    raise UserNotFoundError("User not found")
                user.is_deleted = True
                await users.save(user)

        await self._guarded(update_user_lock_key(user_id), soft_delete)
        self._logger.info("user_deleted", extra={"user_id": user_id})

    async def get_user(self, user_id: int) -> UserResponse:
        async with self._unit_of_work() as users:
            user = await users.get_active(user_id)
        if user is None:
            raise UserNotFoundError("User not found")
        return UserResponse.from_user(user)

    async def list_users(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> UserListResponse:
        """Page through live users ordered by id. Page is 1-based; size is clamped to 1..100."""
        page = max(page, 1)
        page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        async with self._unit_of_work() as users:
            total = await users.count_active()
            items = await users.list_active(offset=(page - 1) * page_size, limit=page_size)
        return UserListResponse(
            items=[UserResponse.from_user(u) for u in items],
            total=total,
            page=page,
            page_size=page_size,
        )
