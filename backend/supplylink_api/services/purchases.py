"""Purchases correlated with an external transaction, and product finalize."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFoundError, ValidationError
from ..models import (
    Account,
    Material,
    Product,
    ProductStatus,
    Purchase,
    PurchaseKind,
    PurchasedMaterial,
)
from ..schemas import ProductCreate
from . import records
from .accounts import get_account

logger = logging.getLogger(__name__)


@dataclass
class MaterialPurchase:
    purchase: Purchase
    purchased_material: PurchasedMaterial
    remaining_stock: int


@dataclass
class ProductPurchase:
    purchase: Purchase
    remaining_stock: int


async def _stock_error(session: AsyncSession, model: type, item_id: int, label: str) -> Exception:
    """Explain why a conditional decrement matched nothing."""
    item = await session.get(model, item_id)
    if item is None:
        return NotFoundError(f"{label} not found")
    if model is Product and item.status != ProductStatus.ACTIVE.value:
        return ValidationError(f"{label} is not available", details={"status": item.status})
    return ValidationError(
        f"Insufficient stock. Only {item.quantity} units available",
        details={"available": item.quantity},
    )


async def purchase_material(
    session: AsyncSession,
    buyer_id: int,
    material_id: int,
    quantity: int,
    external_tx_id: str,
) -> MaterialPurchase:
    """
    Buy ``quantity`` units of a supplier material.

    Stock is decremented with one conditional UPDATE (``quantity >= requested``)
    and the ledger rows are written in the same database transaction.
    ``external_tx_id`` is stored as given and never checked against a ledger.
    """

    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0")
    if not external_tx_id:
        raise ValidationError("Transaction hash is required")

    buyer = await get_account(session, buyer_id)

    result = await session.execute(
        update(Material)
        .where(Material.id == material_id, Material.quantity >= quantity)
        .values(quantity=Material.quantity - quantity)
        .returning(Material)
    )
    material = result.scalar_one_or_none()
    if material is None:
        await session.rollback()
        raise await _stock_error(session, Material, material_id, "Material")

    purchase = Purchase(
        kind=PurchaseKind.MATERIAL.value,
        item_id=material.id,
        item_name=material.name,
        buyer_id=buyer.id,
        buyer_name=buyer.name,
        seller_id=material.owner_id,
        seller_name=material.owner_name,
        quantity=quantity,
        amount=material.price * quantity,
        external_tx_id=external_tx_id,
    )
    session.add(purchase)
    await session.flush()

    purchased = PurchasedMaterial(
        material_id=material.id,
        purchase_id=purchase.id,
        name=material.name,
        owner_id=buyer.id,
        owner_name=buyer.name,
        organization=buyer.organization,
        supplier_id=material.owner_id,
        supplier_name=material.owner_name,
        quantity=quantity,
        price=material.price,
        image=material.image,
        location_address=material.location_address,
        location_lat=material.location_lat,
        location_lng=material.location_lng,
        external_tx_id=external_tx_id,
    )
    session.add(purchased)
    await session.commit()
    await session.refresh(purchase)
    await session.refresh(purchased)

    logger.info(
        "Account %s bought %d x material %s (tx %s), %d left",
        buyer.id, quantity, material.id, external_tx_id, material.quantity,
    )
    return MaterialPurchase(purchase, purchased, material.quantity)


async def create_product(
    session: AsyncSession, owner_id: int, payload: ProductCreate
) -> Product:
    """
    Finalize step of the correlated creation workflow.

    ``material_id`` must name a purchased material owned by the caller. The
    material is not consumed and ``external_tx_id`` is not deduplicated, so
    two calls with the same hash create two products.
    """

    owner: Account = await get_account(session, owner_id)
    material = await records.purchased_materials.get_own(
        session, owner_id, payload.material_id
    )

    product = await records.products.create(
        session,
        owner,
        name=payload.name,
        description=payload.description,
        price=payload.price,
        quantity=payload.quantity,
        image=material.image,
        location_address=material.location_address,
        location_lat=material.location_lat,
        location_lng=material.location_lng,
        material_id=material.id,
        external_tx_id=payload.external_tx_id,
        status=ProductStatus.ACTIVE.value,
    )
    logger.info("Product %s finalized with tx %s", product.id, payload.external_tx_id)
    return product


async def purchase_product(
    session: AsyncSession,
    buyer_id: int,
    product_id: int,
    quantity: int,
    external_tx_id: str,
) -> ProductPurchase:
    """Buy an active product; it flips to sold_out when stock reaches zero."""

    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0")
    if not external_tx_id:
        raise ValidationError("Transaction hash is required")

    buyer = await get_account(session, buyer_id)

    result = await session.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.status == ProductStatus.ACTIVE.value,
            Product.quantity >= quantity,
        )
        .values(
            quantity=Product.quantity - quantity,
            status=case(
                (Product.quantity == quantity, ProductStatus.SOLD_OUT.value),
                else_=Product.status,
            ),
        )
        .returning(Product)
    )
    product = result.scalar_one_or_none()
    if product is None:
        await session.rollback()
        raise await _stock_error(session, Product, product_id, "Product")

    purchase = Purchase(
        kind=PurchaseKind.PRODUCT.value,
        item_id=product.id,
        item_name=product.name,
        buyer_id=buyer.id,
        buyer_name=buyer.name,
        seller_id=product.owner_id,
        seller_name=product.owner_name,
        quantity=quantity,
        amount=product.price * quantity,
        external_tx_id=external_tx_id,
    )
    session.add(purchase)
    await session.commit()
    await session.refresh(purchase)

    logger.info(
        "Account %s bought %d x product %s (tx %s)", buyer.id, quantity, product.id, external_tx_id
    )
    return ProductPurchase(purchase, product.quantity)


async def list_purchases(
    session: AsyncSession, buyer_id: int, kind: PurchaseKind | None = None
) -> list[Purchase]:
    stmt = select(Purchase).where(Purchase.buyer_id == buyer_id)
    if kind is not None:
        stmt = stmt.where(Purchase.kind == kind.value)
    result = await session.execute(stmt.order_by(Purchase.created_at.desc(), Purchase.id.desc()))
    return list(result.scalars().all())


async def list_receipts(session: AsyncSession, seller_id: int) -> list[Purchase]:
    """Completed sales where the caller is the seller."""
    return list(
        await records.seller_receipts.list_all(
            session, Purchase.seller_id == seller_id, Purchase.status == "completed"
        )
    )


async def list_sold_materials(session: AsyncSession, supplier_id: int) -> list[PurchasedMaterial]:
    return list(
        await records.purchased_materials.list_all(
            session, PurchasedMaterial.supplier_id == supplier_id
        )
    )
