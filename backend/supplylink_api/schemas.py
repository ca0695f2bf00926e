"""Pydantic schemas used across the backend API."""
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from .models import ProductStatus, Role

# Largest quantity an INTEGER column holds on every supported backend
MAX_QUANTITY = 2**31 - 1


def _normalise_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class TokenClaims(BaseModel):
    """Information encoded into JWTs."""

    id: int
    email: str
    role: Role


class AccountLogin(BaseModel):
    """Credentials supplied during login."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, value: Any) -> Any:
        return _normalise_email(value)


class AccountCreate(BaseModel):
    """Payload for account registration."""

    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    organization: str = Field(min_length=1)
    role: Role = Role.SUPPLIER
    wallet_address: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, value: Any) -> Any:
        return _normalise_email(value)

    @field_validator("name", "organization", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class AccountRead(BaseModel):
    """Public representation of an account; never includes the secret."""

    id: int
    name: str
    email: str
    organization: str
    role: Role
    wallet_address: str | None = None
    is_active: bool
    is_verified: bool
    created_at: datetime
    last_login: datetime | None = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Token plus the authenticated account."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    account: AccountRead


class AccountStats(BaseModel):
    total_accounts: int
    active_accounts: int
    inactive_accounts: int
    accounts_by_role: dict[str, int]


class AccountList(BaseModel):
    users: list[AccountRead]


class RecordRead(BaseModel):
    """Fields common to every owner-scoped record."""

    id: int
    name: str
    description: str
    quantity: int
    price: float
    image: str
    owner_id: int
    owner_name: str
    organization: str
    location_address: str | None = None
    location_lat: float | None = None
    location_lng: float | None = None
    external_tx_id: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class MaterialRead(RecordRead):
    """Material representation returned by the API."""


class ProductCreate(BaseModel):
    """Finalize payload sent once the external transaction has settled."""

    material_id: int
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0, allow_inf_nan=False)
    quantity: int = Field(ge=0, le=MAX_QUANTITY)
    external_tx_id: str = Field(min_length=1)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    quantity: int | None = Field(default=None, ge=0, le=MAX_QUANTITY)
    status: ProductStatus | None = None


class ProductRead(RecordRead):
    material_id: int
    status: ProductStatus


class ProductCreated(BaseModel):
    message: str = "Product created successfully"
    product: ProductRead


class PurchaseRequest(BaseModel):
    """Buyer-side payload correlated with an external transaction."""

    quantity: int = Field(gt=0, le=MAX_QUANTITY)
    external_tx_id: str = Field(min_length=1)


class PurchaseRead(BaseModel):
    id: int
    kind: str
    item_id: int
    item_name: str
    buyer_id: int
    buyer_name: str
    seller_id: int
    seller_name: str
    quantity: int
    amount: float
    external_tx_id: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class PurchasedMaterialRead(BaseModel):
    id: int
    material_id: int | None = None
    purchase_id: int | None = None
    name: str
    owner_id: int
    owner_name: str
    supplier_id: int
    supplier_name: str
    quantity: int
    price: float
    image: str
    location_address: str | None = None
    location_lat: float | None = None
    location_lng: float | None = None
    external_tx_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class MaterialPurchaseResult(BaseModel):
    message: str = "Purchase successful"
    purchase: PurchaseRead
    purchased_material: PurchasedMaterialRead
    remaining_stock: int


class ProductPurchaseResult(BaseModel):
    message: str = "Purchase successful"
    purchase: PurchaseRead
    remaining_stock: int


class Message(BaseModel):
    message: str


class HealthStatus(BaseModel):
    status: str
    store_connected: bool
    timestamp: datetime


def compute_expiry(minutes: int) -> datetime:
    """Return an absolute expiration timestamp for tokens."""

    return datetime.now(timezone.utc) + timedelta(minutes=minutes)
