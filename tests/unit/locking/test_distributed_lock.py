"""DistributedLock: mutual exclusion, token-gated release/refresh, expiry, TTL, key naming."""

import asyncio
import math

import pytest

from app.locking import (
    DistributedLock,
    LockContentionError,
    LockMismatchError,
    LockNotAcquiredError,
    LockNotHeldError,
    StoreUnavailableError,
    resource_key,
)


@pytest.mark.asyncio
async def test_acquire_release(lock, backend):
    token = await lock.acquire("register:alice", ttl=10)
    assert await backend.get("lock:register:alice") == token
    await lock.release("register:alice", token)
    assert await backend.get("lock:register:alice") is None


@pytest.mark.asyncio
async def test_acquire_fails_when_held(lock):
    await lock.acquire("key1", ttl=10)
    with pytest.raises(LockContentionError) as exc_info:
        await lock.acquire("key1", ttl=10)
    assert exc_info.value.key == "key1"


@pytest.mark.asyncio
async def test_tokens_are_unique_per_acquisition(lock):
    t1 = await lock.acquire("a", ttl=10)
    t2 = await lock.acquire("b", ttl=10)
    assert t1 != t2


@pytest.mark.asyncio
async def test_concurrent_acquire_single_winner(backend):
    """Many tasks race for one key; exactly one gets a token."""
    lock = DistributedLock(backend=backend)
    results = await asyncio.gather(
        *(lock.acquire("same_key", ttl=10) for _ in range(20)),
        return_exceptions=True,
    )
    winners = [r for r in results if isinstance(r, str)]
    losers = [r for r in results if isinstance(r, LockContentionError)]
    assert len(winners) == 1
    assert len(losers) == 19


@pytest.mark.asyncio
async def test_release_with_foreign_token_keeps_holder(lock, backend):
    token = await lock.acquire("key1", ttl=10)
    with pytest.raises(LockMismatchError):
        await lock.release("key1", "not-the-token")
    assert await backend.get("lock:key1") == token


@pytest.mark.asyncio
async def test_double_release_is_mismatch(lock):
    token = await lock.acquire("key1", ttl=10)
    await lock.release("key1", token)
    with pytest.raises(LockMismatchError):
        await lock.release("key1", token)


@pytest.mark.asyncio
async def test_release_without_token_is_caller_bug_not_mismatch(lock):
    with pytest.raises(LockNotAcquiredError) as exc_info:
        await lock.release("key1", None)
    assert not isinstance(exc_info.value, LockMismatchError)


@pytest.mark.asyncio
async def test_expired_lock_is_reclaimable(lock):
    """A holder that never releases loses the key after ttl."""
    stale = await lock.acquire("key1", ttl=0.05)
    await asyncio.sleep(0.1)
    fresh = await lock.acquire("key1", ttl=10)
    assert fresh != stale
    with pytest.raises(LockMismatchError):
        await lock.release("key1", stale)
    await lock.release("key1", fresh)


@pytest.mark.asyncio
async def test_refresh_extends_for_owner(lock):
    token = await lock.acquire("key1", ttl=0.2)
    await lock.refresh("key1", token, ttl=5)
    assert await lock.ttl("key1") > 3


@pytest.mark.asyncio
async def test_refresh_with_foreign_token_does_not_touch_holder(lock):
    await lock.acquire("key1", ttl=1)
    before = await lock.ttl("key1")
    with pytest.raises(LockMismatchError):
        await lock.refresh("key1", "someone-else", ttl=60)
    assert await lock.ttl("key1") <= before


@pytest.mark.asyncio
async def test_refresh_without_token(lock):
    with pytest.raises(LockNotAcquiredError):
        await lock.refresh("key1", "", ttl=1)


@pytest.mark.asyncio
async def test_ttl_not_held(lock):
    with pytest.raises(LockNotHeldError):
        await lock.ttl("missing")


@pytest.mark.asyncio
async def test_ttl_without_expiry_is_infinite():
    class NoExpiryBackend:
        async def pttl(self, key: str) -> int:
            return -1

    lock = DistributedLock(backend=NoExpiryBackend())
    assert await lock.ttl("key1") == math.inf


@pytest.mark.asyncio
async def test_non_positive_ttl_rejected(lock):
    with pytest.raises(ValueError):
        await lock.acquire("key1", ttl=0)


@pytest.mark.asyncio
async def test_store_outage_is_not_contention(failing_backend):
    lock = DistributedLock(backend=failing_backend)
    with pytest.raises(StoreUnavailableError):
        await lock.acquire("key1", ttl=10)
    with pytest.raises(StoreUnavailableError):
        await lock.release("key1", "token")


@pytest.mark.asyncio
async def test_custom_prefix(backend):
    lock = DistributedLock(backend=backend, key_prefix="app1:lock:")
    token = await lock.acquire("register:bob", ttl=10)
    assert await backend.get("app1:lock:register:bob") == token


@pytest.mark.asyncio
async def test_metrics_by_lock_domain(lock, metrics):
    token = await lock.acquire("register:alice", ttl=10)
    with pytest.raises(LockContentionError):
        await lock.acquire("register:alice", ttl=10)
    await lock.release("register:alice", token)
    assert metrics.count("lock_acquired", category="register") == 1
    assert metrics.count("lock_contention", category="register") == 1
    assert metrics.count("lock_released", category="register") == 1


@pytest.mark.asyncio
async def test_cancelled_acquire_cleans_up_its_own_entry(backend):
    """If the SET lands but the caller is cancelled before seeing it, nothing is left behind."""

    class SlowAckBackend:
        def __init__(self, inner):
            self.inner = inner

        async def set_nx_px(self, key, value, ttl_ms):
            await self.inner.set_nx_px(key, value, ttl_ms)
            await asyncio.sleep(10)  # reply never arrives in time
            return True

        async def delete_if_value(self, key, value):
            return await self.inner.delete_if_value(key, value)

    lock = DistributedLock(backend=SlowAckBackend(backend))
    task = asyncio.create_task(lock.acquire("key1", ttl=30))
    await asyncio.sleep(0.01)
    assert await backend.get("lock:key1") is not None
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert await backend.get("lock:key1") is None


@pytest.mark.asyncio
async def test_alice_scenario(lock):
    """Task A holds lock:register:alice; B is refused until A releases, then gets a new token."""
    key = resource_key("register", "alice")
    t1 = await lock.acquire(key, ttl=10)
    with pytest.raises(LockContentionError):
        await lock.acquire(key, ttl=10)
    await lock.release(key, t1)
    t2 = await lock.acquire(key, ttl=10)
    assert t2 != t1


def test_resource_key_formats():
    assert resource_key("register", "alice") == "register:alice"
    assert resource_key("update:user", 42) == "update:user:42"


@pytest.mark.parametrize(
    "domain, parts",
    [
        ("", ("alice",)),
        ("register", ()),
        ("register", ("",)),
        ("register", ("a:b",)),
        ("register", ("bad name",)),
        ("register", ("naïve",)),
        ("update::user", (1,)),
    ],
)
def test_resource_key_rejects_bad_segments(domain, parts):
    with pytest.raises(ValueError):
        resource_key(domain, *parts)
