"""Request helpers shared by the API tests."""
from httpx import AsyncClient


def bearer(auth: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth['access_token']}"}


async def create_material(client: AsyncClient, auth: dict, **fields) -> dict:
    data = {
        "name": "Steel",
        "quantity": "100",
        "price": "5",
        "image_url": "https://img.example.com/steel.png",
    }
    data.update({k: str(v) for k, v in fields.items()})
    response = await client.post("/materials", data=data, headers=bearer(auth))
    assert response.status_code == 201, response.text
    return response.json()


async def buy_material(
    client: AsyncClient, auth: dict, material_id: int, quantity: int = 10, tx: str = "0xabc"
) -> dict:
    response = await client.post(
        f"/materials/{material_id}/purchase",
        json={"quantity": quantity, "external_tx_id": tx},
        headers=bearer(auth),
    )
    assert response.status_code == 200, response.text
    return response.json()


def product_payload(material_id: int, tx: str = "0xfeed", **overrides) -> dict:
    payload = {
        "material_id": material_id,
        "name": "Steel Beam",
        "description": "Rolled from grade A steel",
        "price": 12.5,
        "quantity": 20,
        "external_tx_id": tx,
    }
    payload.update(overrides)
    return payload
