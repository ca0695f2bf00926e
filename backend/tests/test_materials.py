"""Owner-scoped material endpoints."""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from helpers import bearer, create_material
from supplylink_api.models import Account, Material


@pytest.mark.asyncio
async def test_materials_are_scoped_to_their_supplier(client: AsyncClient, register) -> None:
    """Alice sees her steel; another supplier sees nothing of hers."""

    alice = await register("alice@example.com", name="Alice", organization="Alice Alloys")
    other = await register("oscar@example.com")

    created = await create_material(client, alice, name="Steel", quantity=100, price=5)
    assert created["owner_id"] == alice["account"]["id"]
    assert created["owner_name"] == "Alice"
    assert created["organization"] == "Alice Alloys"
    assert created["external_tx_id"] is None

    mine = await client.get("/materials/mine", headers=bearer(alice))
    assert mine.status_code == 200
    assert [m["name"] for m in mine.json()] == ["Steel"]

    theirs = await client.get("/materials/mine", headers=bearer(other))
    assert theirs.status_code == 200
    assert theirs.json() == []


@pytest.mark.asyncio
async def test_missing_image_fails_without_persisting(client: AsyncClient, register, session_factory) -> None:
    alice = await register("alice@example.com")

    response = await client.post(
        "/materials",
        data={"name": "Copper", "quantity": "5", "price": "3"},
        headers=bearer(alice),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Image is required"

    async with session_factory() as session:
        assert await session.scalar(select(func.count(Material.id))) == 0


@pytest.mark.asyncio
async def test_uploaded_image_is_stored(client: AsyncClient, register, tmp_path) -> None:
    alice = await register("alice@example.com")

    response = await client.post(
        "/materials",
        data={"name": "Zinc", "quantity": "8", "price": "2.5", "location_address": "Dock 4"},
        files={"image": ("zinc.png", b"\x89PNG fake", "image/png")},
        headers=bearer(alice),
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["image"].startswith("/media/")
    assert body["image"].endswith(".png")
    assert body["location_address"] == "Dock 4"
    stored = tmp_path / "media" / body["image"].rsplit("/", 1)[-1]
    assert stored.read_bytes() == b"\x89PNG fake"


@pytest.mark.asyncio
async def test_unsupported_image_format_is_rejected(client: AsyncClient, register) -> None:
    alice = await register("alice@example.com")

    response = await client.post(
        "/materials",
        data={"name": "Zinc", "quantity": "8", "price": "2.5"},
        files={"image": ("zinc.gif", b"GIF89a", "image/gif")},
        headers=bearer(alice),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_negative_quantity_or_price_is_rejected(client: AsyncClient, register) -> None:
    alice = await register("alice@example.com")

    for data in ({"quantity": "-1", "price": "1"}, {"quantity": "1", "price": "-0.5"}):
        response = await client.post(
            "/materials",
            data={"name": "Lead", "image_url": "https://img.example.com/lead.png", **data},
            headers=bearer(alice),
        )
        assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [
        ("price", "inf"),
        ("price", "nan"),
        ("quantity", str(10**20)),
        ("location_lat", "inf"),
    ],
)
async def test_out_of_range_numbers_are_rejected(
    client: AsyncClient, register, session_factory, field: str, value: str
) -> None:
    alice = await register("alice@example.com")
    data = {"name": "Lead", "quantity": "1", "price": "1", "image_url": "https://img.example.com/lead.png"}
    data[field] = value

    response = await client.post("/materials", data=data, headers=bearer(alice))
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"

    async with session_factory() as session:
        assert await session.scalar(select(func.count(Material.id))) == 0


@pytest.mark.asyncio
async def test_update_rejects_infinite_price(client: AsyncClient, register) -> None:
    alice = await register("alice@example.com")
    material = await create_material(client, alice, price=5)

    response = await client.put(
        f"/materials/{material['id']}", data={"price": "inf"}, headers=bearer(alice)
    )
    assert response.status_code == 400
    mine = (await client.get("/materials/mine", headers=bearer(alice))).json()
    assert mine[0]["price"] == 5


@pytest.mark.asyncio
async def test_rejected_update_leaves_no_stored_image(client: AsyncClient, register, tmp_path) -> None:
    alice = await register("alice@example.com")
    mallory = await register("mallory@example.com")
    material = await create_material(client, alice)
    upload = {"image": ("new.png", b"\x89PNG new", "image/png")}

    for material_id in (material["id"], 424242):
        response = await client.put(
            f"/materials/{material_id}", files=upload, headers=bearer(mallory)
        )
        assert response.status_code == 404

    media = tmp_path / "media"
    assert not media.exists() or list(media.iterdir()) == []


@pytest.mark.asyncio
async def test_owner_image_replacement_is_kept(client: AsyncClient, register, tmp_path) -> None:
    alice = await register("alice@example.com")
    material = await create_material(client, alice)

    response = await client.put(
        f"/materials/{material['id']}",
        files={"image": ("new.png", b"\x89PNG new", "image/png")},
        headers=bearer(alice),
    )
    assert response.status_code == 200
    stored = tmp_path / "media" / response.json()["image"].rsplit("/", 1)[-1]
    assert stored.read_bytes() == b"\x89PNG new"


@pytest.mark.asyncio
async def test_list_own_is_newest_first_and_stable(client: AsyncClient, register) -> None:
    alice = await register("alice@example.com")
    for name in ("Iron", "Nickel", "Tin"):
        await create_material(client, alice, name=name)

    first = (await client.get("/materials/mine", headers=bearer(alice))).json()
    second = (await client.get("/materials/mine", headers=bearer(alice))).json()

    assert [m["name"] for m in first] == ["Tin", "Nickel", "Iron"]
    assert first == second


@pytest.mark.asyncio
async def test_owner_can_update_and_delete(client: AsyncClient, register) -> None:
    alice = await register("alice@example.com")
    material = await create_material(client, alice)

    updated = await client.put(
        f"/materials/{material['id']}",
        data={"quantity": "40", "price": "6.5"},
        headers=bearer(alice),
    )
    assert updated.status_code == 200
    assert updated.json()["quantity"] == 40
    assert updated.json()["price"] == 6.5
    assert updated.json()["name"] == "Steel"

    deleted = await client.delete(f"/materials/{material['id']}", headers=bearer(alice))
    assert deleted.status_code == 200
    assert (await client.get("/materials/mine", headers=bearer(alice))).json() == []


@pytest.mark.asyncio
async def test_foreign_record_looks_like_missing_record(client: AsyncClient, register) -> None:
    """Touching another supplier's material is indistinguishable from a bad id."""

    alice = await register("alice@example.com")
    mallory = await register("mallory@example.com")
    material = await create_material(client, alice)

    foreign_put = await client.put(
        f"/materials/{material['id']}", data={"quantity": "0"}, headers=bearer(mallory)
    )
    missing_put = await client.put("/materials/9999", data={"quantity": "0"}, headers=bearer(mallory))
    assert foreign_put.status_code == missing_put.status_code == 404
    assert foreign_put.json() == missing_put.json()

    foreign_delete = await client.delete(f"/materials/{material['id']}", headers=bearer(mallory))
    missing_delete = await client.delete("/materials/9999", headers=bearer(mallory))
    assert foreign_delete.status_code == missing_delete.status_code == 404
    assert foreign_delete.json() == missing_delete.json()

    mine = (await client.get("/materials/mine", headers=bearer(alice))).json()
    assert mine[0]["quantity"] == 100


@pytest.mark.asyncio
async def test_role_and_token_are_enforced(client: AsyncClient, register) -> None:
    maker = await register("maker@example.com", role="manufacturer")

    no_token = await client.get("/materials/mine")
    assert no_token.status_code == 401
    assert no_token.json()["error"] == "MISSING_TOKEN"

    garbage = await client.get("/materials/mine", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401
    assert garbage.json()["error"] == "INVALID_TOKEN"

    wrong_role = await client.post(
        "/materials",
        data={"name": "Steel", "quantity": "1", "price": "1", "image_url": "x"},
        headers=bearer(maker),
    )
    assert wrong_role.status_code == 403
    assert wrong_role.json()["error"] == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_available_lists_every_owner(client: AsyncClient, register) -> None:
    alice = await register("alice@example.com")
    oscar = await register("oscar@example.com")
    customer = await register("cathy@example.com", role="customer")
    await create_material(client, alice, name="Steel")
    await create_material(client, oscar, name="Empty", quantity=0)

    everything = await client.get("/materials/available", headers=bearer(customer))
    assert {m["name"] for m in everything.json()} == {"Steel", "Empty"}

    in_stock = await client.get("/materials/available?in_stock=true", headers=bearer(customer))
    assert [m["name"] for m in in_stock.json()] == ["Steel"]


@pytest.mark.asyncio
async def test_owner_snapshot_is_not_resynced(client: AsyncClient, register, session_factory) -> None:
    alice = await register("alice@example.com", name="Alice", organization="Alice Alloys")
    await create_material(client, alice)

    async with session_factory() as session:
        account = await session.get(Account, alice["account"]["id"])
        account.name = "Alice Renamed"
        account.organization = "New Co"
        await session.commit()

    mine = (await client.get("/materials/mine", headers=bearer(alice))).json()
    assert mine[0]["owner_name"] == "Alice"
    assert mine[0]["organization"] == "Alice Alloys"
