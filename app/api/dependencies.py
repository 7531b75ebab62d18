"""FastAPI dependency injection: lock backend, lock, unit of work, hasher, UserService."""

import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.application.unit_of_work import UnitOfWork
from app.application.user_service import UserService
from app.config.settings import get_settings
from app.infrastructure.cache.redis_client import RedisClient
from app.infrastructure.database.session import create_engine, create_session_factory
from app.infrastructure.database.unit_of_work_db import SqlAlchemyUnitOfWork
from app.locking import DistributedLock, InMemoryLockBackend, LockBackend, RetryPolicy
from app.observability.metrics import MetricsCollector
from app.security.passwords import PasswordHasher

_lock_backend: LockBackend | None = None
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Return process-wide metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_lock_backend() -> LockBackend:
    """Return the shared lock backend: one Redis connection pool per process."""
    global _lock_backend
    if _lock_backend is None:
        settings = get_settings()
        if settings.lock_backend == "memory":
            _lock_backend = InMemoryLockBackend()
        else:
            _lock_backend = RedisClient(settings.redis_url)
    return _lock_backend


def get_distributed_lock(
    backend: Annotated[LockBackend, Depends(get_lock_backend)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> DistributedLock:
    settings = get_settings()
    return DistributedLock(
        backend=backend,
        key_prefix=settings.lock_key_prefix,
        metrics_callback=metrics if settings.enable_metrics else None,
    )


def get_unit_of_work() -> UnitOfWork:
    """Return a unit of work over the shared engine (created on first use)."""
    global _engine, _session_factory
    if _session_factory is None:
        _engine = create_engine(get_settings().database_url)
        _session_factory = create_session_factory(_engine)
    return SqlAlchemyUnitOfWork(_session_factory)


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(iterations=get_settings().password_hash_iterations)


async def get_user_service(
    lock: Annotated[DistributedLock, Depends(get_distributed_lock)],
    unit_of_work: Annotated[UnitOfWork, Depends(get_unit_of_work)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    """Build UserService with injected lock, unit of work, hasher, logger and lock policy."""
    settings = get_settings()
    return UserService(
        lock=lock,
        unit_of_work=unit_of_work,
        hasher=hasher,
        logger=logging.getLogger("app.application.user_service"),
        lock_ttl=settings.lock_ttl_seconds,
        retry=RetryPolicy(
            max_attempts=settings.lock_retry_attempts,
            delay=settings.lock_retry_delay_ms / 1000.0,
        ),
        acquire_timeout=settings.lock_acquire_timeout_seconds,
    )


async def close_resources() -> None:
    """Close the Redis pool and DB engine at shutdown."""
    global _lock_backend, _engine, _session_factory
    if isinstance(_lock_backend, RedisClient):
        await _lock_backend.close()
    if _engine is not None:
        await _engine.dispose()
    _lock_backend = None
    _engine = None
    _session_factory = None
