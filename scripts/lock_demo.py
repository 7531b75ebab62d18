# scripts/lock_demo.py

import sys
from pathlib import Path

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from app.config.settings import get_settings
from app.infrastructure.cache.redis_client import RedisClient
from app.locking import DistributedLock, LockContentionError, LockNotHeldError, RetryPolicy, try_acquire


async def demo():
    settings = get_settings()
    client = RedisClient(settings.redis_url)
    lock = DistributedLock(backend=client, key_prefix=settings.lock_key_prefix)
    key = "register:demo"
    try:
        print("Redis reachable:", await client.ping())

        token = await lock.acquire(key, ttl=5)
        print("First acquire token:", token)

        try:
            await try_acquire(lock, key, 5, RetryPolicy(max_attempts=3, delay=0.1))
        except LockContentionError as e:
            print("Second acquire refused after", e.attempts, "attempts")

        print("Remaining TTL (s):", await lock.ttl(key))
        await lock.refresh(key, token, ttl=10)
        print("Refreshed TTL (s):", await lock.ttl(key))

        await lock.release(key, token)
        try:
            await lock.ttl(key)
        except LockNotHeldError:
            print("Released; key is gone")
    finally:
        await client.close()


asyncio.run(demo())
