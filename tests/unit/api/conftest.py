"""Fixtures for API unit tests: in-memory lock backend, in-memory unit of work, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.security.passwords import PasswordHasher


@pytest.fixture
def app_with_overrides(backend, unit_of_work):
    """App with lock backend, database and hasher overridden for testing."""
    from app.api import dependencies

    app.dependency_overrides[dependencies.get_lock_backend] = lambda: backend
    app.dependency_overrides[dependencies.get_unit_of_work] = lambda: unit_of_work
    app.dependency_overrides[dependencies.get_password_hasher] = lambda: PasswordHasher(iterations=1)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
