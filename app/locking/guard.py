"""Scoped acquisition: pair a lock with guaranteed release on every exit path."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from app.locking.distributed_lock import DistributedLock
from app.locking.exceptions import LockMismatchError, StoreUnavailableError
from app.locking.retry import RetryPolicy, try_acquire

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockHandle:
    """Proof of ownership for one acquisition. The token must not leave its holder."""

    lock: DistributedLock
    resource: str
    token: str
    ttl: float

    @property
    def key(self) -> str:
        return self.lock.full_key(self.resource)

    async def refresh(self, ttl: float | None = None) -> None:
        """Extend the lock (token-gated). Raises LockMismatchError if ownership was lost."""
        await self.lock.refresh(self.resource, self.token, ttl if ttl is not None else self.ttl)

    async def remaining(self) -> float:
        return await self.lock.ttl(self.resource)


async def _release_quietly(handle: LockHandle) -> None:
    """Release once; report failures without overriding the critical section's outcome."""
    try:
        await handle.lock.release(handle.resource, handle.token)
    except LockMismatchError:
        logger.warning(
            "lock_expired_during_critical_section",
            extra={"lock_key": handle.key, "ttl": handle.ttl},
        )
    except StoreUnavailableError as e:
        logger.error(
            "lock_release_failed",
            extra={"lock_key": handle.key, "error": e.message},
        )
    except Exception as e:
        # Store-side errors such as a read-only replica; the entry expires by TTL.
        logger.error(
            "lock_release_failed",
            extra={"lock_key": handle.key, "error": str(e)},
            exc_info=True,
        )


@asynccontextmanager
async def locked(
    lock: DistributedLock,
    key: str,
    ttl: float,
    *,
    retry: RetryPolicy | None = None,
    timeout: float | None = None,
) -> AsyncIterator[LockHandle]:
    """
    Hold key for the duration of the block.

    Single probe when retry is None. Acquisition errors propagate before the block
    runs; once acquired, release is attempted exactly once however the block exits.
    """
    token = await try_acquire(lock, key, ttl, retry or RetryPolicy.single(), timeout=timeout)
    handle = LockHandle(lock=lock, resource=key, token=token, ttl=ttl)
    try:
        yield handle
    finally:
        await _release_quietly(handle)


async def with_lock(
    lock: DistributedLock,
    key: str,
    ttl: float,
    critical_section: Callable[[], Awaitable[T]],
    *,
    retry: RetryPolicy | None = None,
    timeout: float | None = None,
) -> T:
    """Run critical_section exactly once while holding key; return its result."""
    async with locked(lock, key, ttl, retry=retry, timeout=timeout):
        return await critical_section()
