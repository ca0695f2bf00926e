"""Purchase history for each side of a sale."""
from typing import Sequence

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import (
    get_db_session,
    require_customer,
    require_manufacturer,
    require_supplier,
)
from ..models import Purchase, PurchasedMaterial, PurchaseKind
from ..schemas import Message, PurchasedMaterialRead, PurchaseRead, TokenClaims
from ..services import purchases, records

router = APIRouter(tags=["history"])


@router.get("/manufacturer/purchases", response_model=list[PurchaseRead])
async def manufacturer_purchases(
    claims: TokenClaims = Depends(require_manufacturer),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Purchase]:
    return await purchases.list_purchases(session, claims.id, PurchaseKind.MATERIAL)


@router.get("/manufacturer/purchased-materials", response_model=list[PurchasedMaterialRead])
async def manufacturer_purchased_materials(
    claims: TokenClaims = Depends(require_manufacturer),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[PurchasedMaterial]:
    return await records.purchased_materials.list_own(session, claims.id)


@router.get("/supplier/purchased-materials", response_model=list[PurchasedMaterialRead])
async def supplier_sold_materials(
    claims: TokenClaims = Depends(require_supplier),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[PurchasedMaterial]:
    """Materials this supplier has sold, as held by the buyers."""
    return await purchases.list_sold_materials(session, claims.id)


@router.get("/supplier/receipts", response_model=list[PurchaseRead])
async def supplier_receipts(
    claims: TokenClaims = Depends(require_supplier),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Purchase]:
    return await purchases.list_receipts(session, claims.id)


@router.delete("/supplier/receipts/{receipt_id}", response_model=Message)
async def delete_supplier_receipt(
    receipt_id: int,
    claims: TokenClaims = Depends(require_supplier),
    session: AsyncSession = Depends(get_db_session),
) -> Message:
    await records.seller_receipts.delete(session, claims.id, receipt_id)
    return Message(message="Receipt deleted successfully")


@router.get("/customer/purchases", response_model=list[PurchaseRead])
async def customer_purchases(
    claims: TokenClaims = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Purchase]:
    return await purchases.list_purchases(session, claims.id)


@router.delete("/customer/purchases/{purchase_id}", response_model=Message)
async def delete_customer_purchase(
    purchase_id: int,
    claims: TokenClaims = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
) -> Message:
    await records.buyer_purchases.delete(session, claims.id, purchase_id)
    return Message(message="Purchase deleted successfully")
