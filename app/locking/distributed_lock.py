"""
Distributed mutual-exclusion lock over a shared key-value store.

SET NX PX with a fresh token per acquire; release and refresh are token-gated and
atomic on the store side; TTL is the only recovery path for crashed holders.
The store is the single source of truth: no client-side token map is kept.
"""

import asyncio
import logging
import math
import uuid
from typing import Any, Awaitable, TypeVar

from app.locking.backend import PTTL_NO_EXPIRY, PTTL_NO_KEY, LockBackend
from app.locking.exceptions import (
    LockContentionError,
    LockMismatchError,
    LockNotAcquiredError,
    LockNotHeldError,
    StoreUnavailableError,
)

T = TypeVar("T")

LOCK_PREFIX = "lock:"
KEY_SEPARATOR = ":"

logger = logging.getLogger(__name__)


def _check_segment(segment: str, *, allow_separator: bool) -> None:
    if not segment:
        raise ValueError("lock key segments must not be empty")
    if not segment.isascii() or not segment.isprintable() or any(c.isspace() for c in segment):
        raise ValueError(f"lock key segment must be printable ASCII without spaces: {segment!r}")
    if not allow_separator and KEY_SEPARATOR in segment:
        raise ValueError(f"lock key part must not contain '{KEY_SEPARATOR}': {segment!r}")


def resource_key(domain: str, *parts: Any) -> str:
    """
    Build a lock resource key from a resource domain and its natural key.

    resource_key("register", "alice") -> "register:alice"
    resource_key("update:user", 42) -> "update:user:42"
    """
    for piece in domain.split(KEY_SEPARATOR):
        _check_segment(piece, allow_separator=False)
    if not parts:
        raise ValueError("lock key needs at least one resource identifier")
    rendered = [str(p) for p in parts]
    for piece in rendered:
        _check_segment(piece, allow_separator=False)
    return KEY_SEPARATOR.join([domain, *rendered])


def to_millis(seconds: float) -> int:
    """Convert a positive duration in seconds to whole milliseconds (at least 1)."""
    if seconds <= 0:
        raise ValueError(f"lock ttl must be positive, got {seconds}")
    return max(1, int(round(seconds * 1000)))


class DistributedLock:
    """
    Lock primitive. One store round-trip per operation; acquire never waits.
    Backend is injected (Redis in production, in-memory in tests).
    """

    def __init__(
        self,
        backend: LockBackend,
        key_prefix: str = LOCK_PREFIX,
        metrics_callback: Any = None,
    ) -> None:
        self._backend = backend
        self._prefix = key_prefix
        self._metrics = metrics_callback

    def full_key(self, key: str) -> str:
        """Store key for a resource key, e.g. register:alice -> lock:register:alice."""
        return f"{self._prefix}{key}"

    def _count(self, name: str, key: str) -> None:
        if self._metrics and hasattr(self._metrics, "increment"):
            self._metrics.increment(name, 1, category=key.split(KEY_SEPARATOR, 1)[0])

    async def _call(self, key: str, op: Awaitable[T]) -> T:
        """Await a backend operation, translating transport failures to StoreUnavailableError."""
        try:
            return await op
        except StoreUnavailableError:
            self._count("lock_store_unavailable", key)
            raise
        except (ConnectionError, TimeoutError, OSError) as e:
            self._count("lock_store_unavailable", key)
            raise StoreUnavailableError(f"Lock store unavailable: {e}") from e

    async def _discard(self, full_key: str, token: str) -> None:
        """Best-effort token-gated delete for an acquire interrupted mid-flight."""
        try:
            await asyncio.shield(self._backend.delete_if_value(full_key, token))
        except Exception as e:
            # The entry, if it was written, still expires by TTL.
            logger.warning("lock_discard_failed", extra={"lock_key": full_key, "error": str(e)})

    async def acquire(self, key: str, ttl: float) -> str:
        """
        Single atomic probe: set key to a fresh token only if absent, with expiry.
        Returns the token. Raises LockContentionError if already held.
        """
        full_key = self.full_key(key)
        ttl_ms = to_millis(ttl)
        token = uuid.uuid4().hex
        try:
            acquired = await self._call(key, self._backend.set_nx_px(full_key, token, ttl_ms))
        except asyncio.CancelledError:
            # The SET may have landed before cancellation; never leave it behind.
            await self._discard(full_key, token)
            raise
        if not acquired:
            self._count("lock_contention", key)
            logger.debug("lock_contention", extra={"lock_key": full_key})
            raise LockContentionError(key)
        self._count("lock_acquired", key)
        logger.debug("lock_acquired", extra={"lock_key": full_key})
        return token

    async def release(self, key: str, token: str | None) -> None:
        """Delete the lock only if it still holds token (atomic compare-and-delete)."""
        if not token:
            raise LockNotAcquiredError(f"Cannot release {key}: lock was never acquired")
        full_key = self.full_key(key)
        deleted = await self._call(key, self._backend.delete_if_value(full_key, token))
        if not deleted:
            self._count("lock_release_mismatch", key)
            raise LockMismatchError(key)
        self._count("lock_released", key)
        logger.debug("lock_released", extra={"lock_key": full_key})

    async def refresh(self, key: str, token: str | None, ttl: float) -> None:
        """Extend expiry to ttl only if the lock still holds token."""
        if not token:
            raise LockNotAcquiredError(f"Cannot refresh {key}: lock was never acquired")
        full_key = self.full_key(key)
        extended = await self._call(
            key, self._backend.pexpire_if_value(full_key, token, to_millis(ttl))
        )
        if not extended:
            self._count("lock_refresh_mismatch", key)
            raise LockMismatchError(key)
        self._count("lock_refreshed", key)

    async def ttl(self, key: str) -> float:
        """Remaining lifetime in seconds. Advisory only; may be stale when read."""
        remaining = await self._call(key, self._backend.pttl(self.full_key(key)))
        if remaining == PTTL_NO_KEY:
            raise LockNotHeldError(key)
        if remaining == PTTL_NO_EXPIRY:
            return math.inf
        return remaining / 1000.0
