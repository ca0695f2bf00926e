"""Registration and login through the HTTP surface."""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from supplylink_api.config import Settings, get_settings
from supplylink_api.main import app
from supplylink_api.models import Account
from supplylink_api.security import verify_password


@pytest.mark.asyncio
async def test_register_then_login(client: AsyncClient, register) -> None:
    """A supplier can register and log back in; a wrong password is refused."""

    body = await register("alice@example.com")
    assert body["token_type"] == "bearer"
    assert body["account"]["role"] == "supplier"
    assert body["account"]["is_active"] is True
    assert body["account"]["is_verified"] is False
    assert body["account"]["last_login"] is None

    ok = await client.post("/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert ok.status_code == 200
    assert ok.json()["access_token"]
    assert ok.json()["account"]["last_login"] is not None

    bad = await client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "INVALID_CREDENTIALS"
    assert bad.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_secret_is_hashed_and_never_returned(client: AsyncClient, register, session_factory) -> None:
    body = await register("bob@example.com", role="manufacturer")

    assert "password" not in body["account"]
    assert "password_hash" not in body["account"]
    assert body["account"]["role"] == "manufacturer"

    async with session_factory() as session:
        account = (await session.execute(select(Account))).scalar_one()
    assert account.password_hash != "secret123"
    assert verify_password("secret123", account.password_hash)


@pytest.mark.asyncio
async def test_unknown_email_and_wrong_password_look_the_same(client: AsyncClient, register) -> None:
    await register("carol@example.com")

    unknown = await client.post("/auth/login", json={"email": "nobody@example.com", "password": "secret123"})
    wrong = await client.post("/auth/login", json={"email": "carol@example.com", "password": "nope-nope"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


@pytest.mark.asyncio
async def test_email_is_trimmed_and_case_insensitive(client: AsyncClient, register) -> None:
    body = await register("  Dave@Example.COM ")
    assert body["account"]["email"] == "dave@example.com"

    response = await client.post("/auth/login", json={"email": "DAVE@example.com", "password": "secret123"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_email_is_rejected(client: AsyncClient, register, session_factory) -> None:
    await register("erin@example.com")

    payload = {
        "name": "Erin Again",
        "email": "ERIN@example.com",
        "password": "secret123",
        "organization": "Elsewhere",
    }
    response = await client.post("/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "CONFLICT"

    async with session_factory() as session:
        assert await session.scalar(select(func.count(Account.id))) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": "f@example.com", "password": "secret123", "organization": "Org"},
        {"name": "F", "password": "secret123", "organization": "Org"},
        {"name": "F", "email": "f@example.com", "organization": "Org"},
        {"name": "F", "email": "f@example.com", "password": "secret123"},
        {"name": "F", "email": "f@example.com", "password": "short", "organization": "Org"},
        {"name": "F", "email": "f@example.com", "password": "secret123", "organization": "Org", "role": "root"},
    ],
)
async def test_invalid_registration_is_a_validation_error(client: AsyncClient, payload: dict) -> None:
    response = await client.post("/auth/register", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"]["errors"]


@pytest.mark.asyncio
async def test_inactive_account_cannot_log_in(client: AsyncClient, register, session_factory) -> None:
    await register("gina@example.com")
    async with session_factory() as session:
        account = (await session.execute(select(Account))).scalar_one()
        account.is_active = False
        await session.commit()

    response = await client.post("/auth/login", json={"email": "gina@example.com", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["error"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_admin_signup_can_be_disabled(client: AsyncClient) -> None:
    app.dependency_overrides[get_settings] = lambda: Settings(
        secret_key="test-secret", allow_admin_signup=False
    )
    payload = {
        "name": "Root",
        "email": "root@example.com",
        "password": "secret123",
        "organization": "Ops",
        "role": "admin",
    }
    response = await client.post("/auth/register", json=payload)
    assert response.status_code == 400

    payload["role"] = "customer"
    assert (await client.post("/auth/register", json=payload)).status_code == 201
