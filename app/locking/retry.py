"""Bounded linear back-off around a single-probe acquire. Polling only; no fairness."""

import asyncio
import time
from dataclasses import dataclass

from app.locking.distributed_lock import DistributedLock
from app.locking.exceptions import LockContentionError, LockTimeoutError


@dataclass(frozen=True)
class RetryPolicy:
    """Up to max_attempts probes, sleeping a fixed delay (seconds) between them."""

    max_attempts: int = 3
    delay: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")

    @classmethod
    def single(cls) -> "RetryPolicy":
        """One probe, no waiting."""
        return cls(max_attempts=1, delay=0.0)


async def try_acquire(
    lock: DistributedLock,
    key: str,
    ttl: float,
    policy: RetryPolicy,
    timeout: float | None = None,
) -> str:
    """
    Acquire key, retrying on contention per policy. Returns the token.

    Raises LockContentionError after the final failed probe, LockTimeoutError once
    the overall timeout elapses. Store errors propagate on the first occurrence.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    for attempt in range(1, policy.max_attempts + 1):
        if deadline is None:
            probe_budget = None
        else:
            probe_budget = deadline - time.monotonic()
            if probe_budget <= 0:
                raise LockTimeoutError(key, timeout)
        try:
            if probe_budget is None:
                return await lock.acquire(key, ttl)
            return await asyncio.wait_for(lock.acquire(key, ttl), timeout=probe_budget)
        except LockContentionError:
            if attempt == policy.max_attempts:
                raise LockContentionError(key, attempts=attempt) from None
        except asyncio.TimeoutError:
            raise LockTimeoutError(key, timeout) from None

        sleep_for = policy.delay
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise LockTimeoutError(key, timeout)
            sleep_for = min(sleep_for, remaining)
        await asyncio.sleep(sleep_for)
    # max_attempts >= 1 guarantees a return or raise inside the loop.
    raise LockContentionError(key, attempts=policy.max_attempts)
