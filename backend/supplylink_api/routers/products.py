"""Manufacturer products and the customer-facing catalog."""
from typing import Sequence

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import (
    get_current_claims,
    get_db_session,
    require_customer,
    require_manufacturer,
)
from ..models import Product, ProductStatus
from ..schemas import (
    Message,
    ProductCreate,
    ProductCreated,
    ProductPurchaseResult,
    ProductRead,
    ProductUpdate,
    PurchaseRead,
    PurchaseRequest,
    TokenClaims,
)
from ..services import purchases, records

router = APIRouter(prefix="/manufacturer/products", tags=["products"])
catalog_router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductCreated, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    claims: TokenClaims = Depends(require_manufacturer),
    session: AsyncSession = Depends(get_db_session),
) -> ProductCreated:
    """Finalize a product once its external transaction has been sent."""

    product = await purchases.create_product(session, claims.id, payload)
    return ProductCreated(product=ProductRead.model_validate(product))


@router.get("", response_model=list[ProductRead])
async def list_my_products(
    claims: TokenClaims = Depends(require_manufacturer),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Product]:
    return await records.products.list_own(session, claims.id)


@router.put("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    claims: TokenClaims = Depends(require_manufacturer),
    session: AsyncSession = Depends(get_db_session),
) -> Product:
    fields = payload.model_dump(exclude_none=True)
    if "status" in fields:
        fields["status"] = ProductStatus(fields["status"]).value
    return await records.products.update(session, claims.id, product_id, fields)


@router.delete("/{product_id}", response_model=Message)
async def delete_product(
    product_id: int,
    claims: TokenClaims = Depends(require_manufacturer),
    session: AsyncSession = Depends(get_db_session),
) -> Message:
    await records.products.delete(session, claims.id, product_id)
    return Message(message="Product deleted successfully")


@catalog_router.get("/available", response_model=list[ProductRead])
async def list_available_products(
    claims: TokenClaims = Depends(get_current_claims),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Product]:
    """Active products with stock, from every manufacturer."""

    return await records.products.list_all(
        session,
        Product.status == ProductStatus.ACTIVE.value,
        Product.quantity > 0,
    )


@catalog_router.post("/{product_id}/purchase", response_model=ProductPurchaseResult)
async def purchase_product(
    product_id: int,
    payload: PurchaseRequest,
    claims: TokenClaims = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
) -> ProductPurchaseResult:
    outcome = await purchases.purchase_product(
        session, claims.id, product_id, payload.quantity, payload.external_tx_id
    )
    return ProductPurchaseResult(
        purchase=PurchaseRead.model_validate(outcome.purchase),
        remaining_stock=outcome.remaining_stock,
    )
