"""Admin-only reporting."""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from helpers import bearer
from supplylink_api.models import Account


@pytest.mark.asyncio
async def test_stats_group_accounts_by_role(client: AsyncClient, register, session_factory) -> None:
    for i in range(3):
        await register(f"supplier{i}@example.com")
    for i in range(2):
        await register(f"maker{i}@example.com", role="manufacturer")

    # the calling admin is an account too
    admin = await register("root@example.com", role="admin")

    async with session_factory() as session:
        account = (
            await session.execute(select(Account).where(Account.email == "supplier0@example.com"))
        ).scalar_one()
        account.is_active = False
        await session.commit()

    response = await client.get("/admin/stats", headers=bearer(admin))
    assert response.status_code == 200
    assert response.json() == {
        "total_accounts": 6,
        "active_accounts": 5,
        "inactive_accounts": 1,
        "accounts_by_role": {"supplier": 3, "manufacturer": 2, "admin": 1},
    }


@pytest.mark.asyncio
async def test_user_listing_hides_secrets(client: AsyncClient, register) -> None:
    admin = await register("root@example.com", role="admin")
    await register("sue@example.com")

    response = await client.get("/admin/users", headers=bearer(admin))
    assert response.status_code == 200
    users = response.json()["users"]
    assert {u["email"] for u in users} == {"root@example.com", "sue@example.com"}
    for user in users:
        assert "password_hash" not in user
        assert "password" not in user


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["supplier", "manufacturer", "customer"])
async def test_admin_routes_reject_other_roles(client: AsyncClient, register, role: str) -> None:
    caller = await register(f"{role}@example.com", role=role)

    for path in ("/admin/stats", "/admin/users"):
        response = await client.get(path, headers=bearer(caller))
        assert response.status_code == 403
