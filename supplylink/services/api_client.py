"""
HTTP API client for talking to the SupplyLink backend.

Usage pattern:

    from supplylink.services.api_client import get_api_client

    client = get_api_client()

    await client.login(email="maker@example.com", password="yourpass")
    products = await client.list_my_products()
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx


# -----------------------------
# Configuration helpers
# -----------------------------


def _load_base_url() -> str:
    """
    Determine the backend base URL.

    Priority:
    1. Environment variable SUPPLYLINK_API_BASE_URL
    2. supplylink/config.json -> {"api_base_url": "..."}
    3. Default: http://127.0.0.1:8000
    """
    env_url = os.getenv("SUPPLYLINK_API_BASE_URL")
    if env_url:
        return env_url.rstrip("/")

    config_path = Path(__file__).resolve().parent.parent / "config.json"
    if config_path.exists():
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            # Broken config falls back to the default
            data = {}
        cfg_url = data.get("api_base_url")
        if cfg_url:
            return cfg_url.rstrip("/")

    return "http://127.0.0.1:8000"


# -----------------------------
# Error types
# -----------------------------


class APIError(Exception):
    """Generic API error."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class AuthError(APIError):
    """Authentication / authorization error."""


class NotFoundError(APIError):
    """Record missing, or owned by somebody else."""


@dataclass
class TokenInfo:
    access_token: str
    expires_at: Optional[str] = None  # ISO8601 string from backend


# -----------------------------
# Main API client
# -----------------------------


class APIClient:
    """
    Reusable HTTP client for the SupplyLink backend.

    Use APIClient.get() to obtain a singleton instance.
    """

    _instance: Optional["APIClient"] = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url: str = (base_url or _load_base_url()).rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._token: Optional[TokenInfo] = None
        self.account: Optional[Dict[str, Any]] = None

    # ---------- Singleton helper ----------

    @classmethod
    def get(cls) -> "APIClient":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    # ---------- Internal helpers ----------

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=10.0,  # seconds
                transport=self._transport,
            )
        return self._client

    def _get_auth_header(self) -> Dict[str, str]:
        """
        Return Authorization header; raise if not logged in.
        """
        if not self._token or not self._token.access_token:
            raise AuthError("Not logged in - call login() first")

        return {"Authorization": f"Bearer {self._token.access_token}"}

    @staticmethod
    def _raise_for_status(resp: httpx.Response, action: str) -> None:
        if resp.is_success:
            return
        try:
            body = resp.json()
        except ValueError:
            body = {}
        message = body.get("message") or resp.text or "Request failed"
        code = body.get("error")
        if resp.status_code in (401, 403):
            raise AuthError(f"{action} failed: {message}", resp.status_code, code)
        if resp.status_code == 404:
            raise NotFoundError(f"{action} failed: {message}", resp.status_code, code)
        raise APIError(f"{action} failed: {message}", resp.status_code, code)

    async def _request(
        self, method: str, path: str, action: str, *, auth: bool = True, **kwargs: Any
    ) -> Any:
        client = await self._ensure_client()
        headers = self._get_auth_header() if auth else {}
        resp = await client.request(method, path, headers=headers, **kwargs)
        self._raise_for_status(resp, action)
        return resp.json()

    def has_token(self) -> bool:
        return bool(self._token and self._token.access_token)

    def set_token(self, access_token: str, expires_at: Optional[str] = None) -> None:
        """
        Manually set a token (useful when you already have a JWT issued by the backend).
        """

        if not access_token:
            raise ValueError("access_token cannot be empty")

        self._token = TokenInfo(access_token=access_token, expires_at=expires_at)

    def _store_auth(self, data: Dict[str, Any]) -> TokenInfo:
        token = TokenInfo(
            access_token=data.get("access_token", ""),
            expires_at=data.get("expires_at"),
        )
        if not token.access_token:
            raise APIError("Backend did not return access_token")
        self._token = token
        self.account = data.get("account")
        return token

    # ---------- Public methods ----------

    async def close(self) -> None:
        """
        Close underlying HTTP connection pool.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health", "/health", auth=False)

    # ---- Authentication ----

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        organization: str,
        role: Optional[str] = None,
        wallet_address: Optional[str] = None,
    ) -> TokenInfo:
        """Call /auth/register and keep the returned token."""
        payload: Dict[str, Any] = {
            "name": name,
            "email": email,
            "password": password,
            "organization": organization,
        }
        if role:
            payload["role"] = role
        if wallet_address:
            payload["wallet_address"] = wallet_address

        data = await self._request("POST", "/auth/register", "/auth/register", auth=False, json=payload)
        return self._store_auth(data)

    async def login(self, email: str, password: str) -> TokenInfo:
        """Call /auth/login and store the JWT for subsequent requests."""
        data = await self._request(
            "POST",
            "/auth/login",
            "/auth/login",
            auth=False,
            json={"email": email, "password": password},
        )
        return self._store_auth(data)

    # ---- Materials ----

    async def create_material(
        self,
        fields: Dict[str, Any],
        image: Optional[tuple[str, bytes, str]] = None,
    ) -> Dict[str, Any]:
        """POST /materials as multipart; ``image`` is (filename, content, content_type)."""
        data = {k: str(v) for k, v in fields.items() if v is not None}
        files = {"image": image} if image else None
        return await self._request("POST", "/materials", "POST /materials", data=data, files=files)

    async def list_my_materials(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/materials/mine", "/materials/mine")

    async def list_available_materials(self, in_stock: bool = False) -> List[Dict[str, Any]]:
        params = {"in_stock": "true"} if in_stock else None
        return await self._request("GET", "/materials/available", "/materials/available", params=params)

    async def purchase_material(
        self, material_id: int, quantity: int, external_tx_id: str
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/materials/{material_id}/purchase",
            "Material purchase",
            json={"quantity": quantity, "external_tx_id": external_tx_id},
        )

    # ---- Products ----

    async def create_product(
        self,
        material_id: int,
        name: str,
        description: str,
        price: float,
        quantity: int,
        external_tx_id: str,
    ) -> Dict[str, Any]:
        """Finalize call: POST /manufacturer/products with the external hash."""
        data = await self._request(
            "POST",
            "/manufacturer/products",
            "Product creation",
            json={
                "material_id": material_id,
                "name": name,
                "description": description,
                "price": price,
                "quantity": quantity,
                "external_tx_id": external_tx_id,
            },
        )
        return data["product"]

    async def list_my_products(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/manufacturer/products", "/manufacturer/products")

    async def list_purchased_materials(self) -> List[Dict[str, Any]]:
        return await self._request(
            "GET", "/manufacturer/purchased-materials", "/manufacturer/purchased-materials"
        )

    async def purchase_product(
        self, product_id: int, quantity: int, external_tx_id: str
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/products/{product_id}/purchase",
            "Product purchase",
            json={"quantity": quantity, "external_tx_id": external_tx_id},
        )


def get_api_client() -> APIClient:
    """Return the process-wide singleton APIClient."""
    return APIClient.get()
