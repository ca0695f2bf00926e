"""Liveness endpoint."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_reports_store(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["store_connected"] is True
    assert body["timestamp"]
