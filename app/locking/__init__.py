"""Distributed locking: lock primitive, retry policy, scoped guard. No FastAPI."""

from app.locking.backend import InMemoryLockBackend, LockBackend
from app.locking.distributed_lock import DistributedLock, resource_key
from app.locking.exceptions import (
    LockContentionError,
    LockError,
    LockMismatchError,
    LockNotAcquiredError,
    LockNotHeldError,
    LockTimeoutError,
    StoreUnavailableError,
)
from app.locking.guard import LockHandle, locked, with_lock
from app.locking.retry import RetryPolicy, try_acquire

__all__ = [
    "DistributedLock",
    "InMemoryLockBackend",
    "LockBackend",
    "LockContentionError",
    "LockError",
    "LockHandle",
    "LockMismatchError",
    "LockNotAcquiredError",
    "LockNotHeldError",
    "LockTimeoutError",
    "RetryPolicy",
    "StoreUnavailableError",
    "locked",
    "resource_key",
    "try_acquire",
    "with_lock",
]
