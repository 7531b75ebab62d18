"""Shared fakes: in-memory lock backend, failing backend, in-memory unit of work."""

import asyncio
import dataclasses
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from app.domain.models.user import User
from app.locking import DistributedLock, InMemoryLockBackend
from app.observability.metrics import MetricsCollector


class FailingLockBackend:
    """Backend that raises on every call (simulated Redis outage)."""

    def __init__(self) -> None:
        self.calls = 0

    async def set_nx_px(self, key: str, value: str, ttl_ms: int) -> bool:
        self.calls += 1
        raise ConnectionError("Redis connection refused")

    async def delete_if_value(self, key: str, value: str) -> bool:
        self.calls += 1
        raise ConnectionError("Redis connection refused")

    async def pexpire_if_value(self, key: str, value: str, ttl_ms: int) -> bool:
        self.calls += 1
        raise ConnectionError("Redis connection refused")

    async def pttl(self, key: str) -> int:
        self.calls += 1
        raise ConnectionError("Redis connection refused")


class InMemoryUserStore:
    """Committed state shared by all units of work in a test."""

    def __init__(self) -> None:
        self.rows: Dict[int, User] = {}
        self.next_id = 1
        self.commits = 0
        self.rollbacks = 0

    def live(self, username: Optional[str] = None) -> List[User]:
        return [
            u for u in self.rows.values()
            if not u.is_deleted and (username is None or u.username == username)
        ]


class FakeUserRepository:
    """Works on a private copy of the rows; changes become visible only on commit."""

    def __init__(self, store: InMemoryUserStore, delay: float) -> None:
        self._store = store
        self._delay = delay
        self.rows = {k: dataclasses.replace(v) for k, v in store.rows.items()}
        self.dirty: set[int] = set()

    async def exists_active_username(self, username: str) -> bool:
        # Widens the check-then-insert window so races would show up.
        await asyncio.sleep(self._delay)
        return any(u.username == username and not u.is_deleted for u in self.rows.values())

    async def add(self, username: str, password_hash: str, nickname: Optional[str]) -> User:
        user = User(
            id=self._store.next_id,
            username=username,
            password_hash=password_hash,
            nickname=nickname,
            created_at=datetime.now(timezone.utc),
        )
        self._store.next_id += 1
        self.rows[user.id] = user
        self.dirty.add(user.id)
        return dataclasses.replace(user)

    async def get_active(self, user_id: int) -> Optional[User]:
        await asyncio.sleep(self._delay)
        user = self.rows.get(user_id)
        if user is None or user.is_deleted:
            return None
        return dataclasses.replace(user)

    async def save(self, user: User) -> User:
        saved = dataclasses.replace(user, updated_at=datetime.now(timezone.utc))
        self.rows[user.id] = saved
        self.dirty.add(user.id)
        return dataclasses.replace(saved)

    async def list_active(self, offset: int, limit: int) -> List[User]:
        live = sorted((u for u in self.rows.values() if not u.is_deleted), key=lambda u: u.id)
        return [dataclasses.replace(u) for u in live[offset:offset + limit]]

    async def count_active(self) -> int:
        return sum(1 for u in self.rows.values() if not u.is_deleted)


class FakeUnitOfWork:
    """Commit on normal exit, discard on exception."""

    def __init__(self, store: InMemoryUserStore, delay: float = 0.0) -> None:
        self._store = store
        self._delay = delay

    @asynccontextmanager
    async def __call__(self):
        repo = FakeUserRepository(self._store, self._delay)
        try:
            yield repo
        except BaseException:
            self._store.rollbacks += 1
            raise
        for user_id in repo.dirty:
            self._store.rows[user_id] = repo.rows[user_id]
        self._store.commits += 1


@pytest.fixture
def backend():
    return InMemoryLockBackend()


@pytest.fixture
def failing_backend():
    return FailingLockBackend()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def lock(backend, metrics):
    return DistributedLock(backend=backend, metrics_callback=metrics)


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def unit_of_work(user_store):
    return FakeUnitOfWork(user_store)


@pytest.fixture
def slow_unit_of_work(user_store):
    """Unit of work whose reads yield to the event loop, so interleavings actually happen."""
    return FakeUnitOfWork(user_store, delay=0.02)
