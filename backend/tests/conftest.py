"""Test fixtures for the backend."""
import os
from collections.abc import Awaitable, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")

from supplylink_api.database import build_engine, create_schema  # noqa: E402
from supplylink_api.dependencies import get_db_session, get_image_storage  # noqa: E402
from supplylink_api.main import app  # noqa: E402
from supplylink_api.services.storage import LocalImageStorage  # noqa: E402

PASSWORD = "secret123"

RegisterFn = Callable[..., Awaitable[dict]]


@pytest_asyncio.fixture
async def session_factory():
    """A fresh in-memory database per test."""

    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory, tmp_path) -> AsyncClient:
    """Provide an HTTP client for integration tests."""

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_image_storage] = lambda: LocalImageStorage(tmp_path / "media")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def register(client: AsyncClient) -> RegisterFn:
    """Register an account and return the auth response body."""

    async def _register(email: str, role: str | None = None, **overrides) -> dict:
        payload = {
            "name": overrides.pop("name", email.split("@")[0].title()),
            "email": email,
            "password": overrides.pop("password", PASSWORD),
            "organization": overrides.pop("organization", "Acme Metals"),
            **overrides,
        }
        if role is not None:
            payload["role"] = role
        response = await client.post("/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _register

