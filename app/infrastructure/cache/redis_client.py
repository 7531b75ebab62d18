# app/infrastructure/cache/redis_client.py

import functools
from typing import Any, Awaitable, Callable, TypeVar

import redis.asyncio as redis
from redis import exceptions as redis_exceptions

from app.locking.exceptions import StoreUnavailableError

T = TypeVar("T")

# KEYS[1] = lock key, ARGV[1] = token
RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""

# KEYS[1] = lock key, ARGV[1] = token, ARGV[2] = ttl in ms
REFRESH_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('pexpire', KEYS[1], ARGV[2])
else
    return 0
end
"""


def _translate_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Map redis transport errors to StoreUnavailableError; other errors pass through."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError) as e:
            raise StoreUnavailableError(f"Redis unavailable: {e}") from e

    return wrapper


class RedisClient:
    """
    Async Redis client shared by all request tasks of a process. Constructed
    explicitly and injected; implements the LockBackend protocol.
    """

    def __init__(self, url: str | None = None, *, client: redis.Redis | None = None) -> None:
        if client is None:
            if not url:
                raise ValueError("RedisClient needs a url or a client")
            client = redis.from_url(url, decode_responses=True)
        self.client = client
        self._release_script = self.client.register_script(RELEASE_SCRIPT)
        self._refresh_script = self.client.register_script(REFRESH_SCRIPT)

    @_translate_errors
    async def set_nx_px(self, key: str, value: str, ttl_ms: int) -> bool:
        """Set key to value only if absent, expiring after ttl_ms. True if set."""
        return bool(await self.client.set(key, value, nx=True, px=ttl_ms))

    @_translate_errors
    async def delete_if_value(self, key: str, value: str) -> bool:
        """Delete key only if its value equals value (atomic). True if deleted."""
        result = await self._release_script(keys=[key], args=[value])
        return int(result) == 1

    @_translate_errors
    async def pexpire_if_value(self, key: str, value: str, ttl_ms: int) -> bool:
        """Set a new ttl_ms only if key still holds value (atomic). True if extended."""
        result = await self._refresh_script(keys=[key], args=[value, ttl_ms])
        return int(result) == 1

    @_translate_errors
    async def pttl(self, key: str) -> int:
        """Remaining ms; -2 if key is absent, -1 if it has no expiry."""
        return int(await self.client.pttl(key))

    @_translate_errors
    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()
