"""Store operations the lock depends on. Injected; no global state."""

import time
from typing import Callable, Protocol

# PTTL reply codes, as returned by Redis.
PTTL_NO_KEY = -2
PTTL_NO_EXPIRY = -1


class LockBackend(Protocol):
    """Minimal atomic store operations for the distributed lock. Durations in milliseconds."""

    async def set_nx_px(self, key: str, value: str, ttl_ms: int) -> bool: ...
    async def delete_if_value(self, key: str, value: str) -> bool: ...
    async def pexpire_if_value(self, key: str, value: str, ttl_ms: int) -> bool: ...
    async def pttl(self, key: str) -> int: ...


class InMemoryLockBackend:
    """
    Single-process backend with the same semantics as Redis, including expiry.
    For tests or single-node development. Entries expire lazily on access.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}  # key -> (value, expires_at)

    def _live_value(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set_nx_px(self, key: str, value: str, ttl_ms: int) -> bool:
        if self._live_value(key) is not None:
            return False
        self._entries[key] = (value, self._clock() + ttl_ms / 1000.0)
        return True

    async def delete_if_value(self, key: str, value: str) -> bool:
        if self._live_value(key) != value:
            return False
        del self._entries[key]
        return True

    async def pexpire_if_value(self, key: str, value: str, ttl_ms: int) -> bool:
        if self._live_value(key) != value:
            return False
        self._entries[key] = (value, self._clock() + ttl_ms / 1000.0)
        return True

    async def pttl(self, key: str) -> int:
        if self._live_value(key) is None:
            return PTTL_NO_KEY
        _, expires_at = self._entries[key]
        return max(0, int((expires_at - self._clock()) * 1000))

    async def get(self, key: str) -> str | None:
        """Current value for key, or None. Inspection helper for tests and debugging."""
        return self._live_value(key)
