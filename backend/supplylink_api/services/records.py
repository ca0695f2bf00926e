"""
Owner-scoped CRUD shared by materials, products and purchase history.

Mutations are issued as a single conditional statement filtered on
``id AND owner``. A record that does not exist and a record that belongs to
someone else both match zero rows, so both surface as the same NotFoundError.
"""
from __future__ import annotations

import logging
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from ..exceptions import NotFoundError, ValidationError
from ..models import Account, Material, Product, Purchase, PurchasedMaterial

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class OwnedRecordStore(Generic[ModelT]):
    """CRUD over ``model`` where writes are restricted to the owning account."""

    def __init__(
        self,
        model: type[ModelT],
        label: str,
        owner_column: InstrumentedAttribute | None = None,
        mutable_fields: frozenset[str] = frozenset(),
    ) -> None:
        self.model = model
        self.label = label
        self.owner_column = owner_column if owner_column is not None else model.owner_id
        self.mutable_fields = mutable_fields

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.label} not found or unauthorized")

    def _owned(self, owner_id: int, record_id: int) -> tuple[Any, Any]:
        return (self.model.id == record_id, self.owner_column == owner_id)

    def _newest_first(self) -> tuple[Any, Any]:
        # id breaks created_at ties in insertion order
        return (self.model.created_at.desc(), self.model.id.desc())

    async def create(
        self, session: AsyncSession, owner: Account, **fields: Any
    ) -> ModelT:
        """Persist a record stamped with ``owner`` and a snapshot of its profile."""

        if not fields.get("image"):
            raise ValidationError("Image is required")

        record = self.model(
            **fields,
            owner_id=owner.id,
            owner_name=owner.name,
            organization=owner.organization,
        )
        session.add(record)
        await session.commit()
        await session.refresh(record)
        logger.info("%s %s created by account %s", self.label, record.id, owner.id)
        return record

    async def list_own(self, session: AsyncSession, owner_id: int) -> Sequence[ModelT]:
        result = await session.execute(
            select(self.model)
            .where(self.owner_column == owner_id)
            .order_by(*self._newest_first())
        )
        return list(result.scalars().all())

    async def list_all(self, session: AsyncSession, *criteria: Any) -> Sequence[ModelT]:
        """Every record regardless of owner, optionally narrowed by ``criteria``."""

        result = await session.execute(
            select(self.model).where(*criteria).order_by(*self._newest_first())
        )
        return list(result.scalars().all())

    async def get_own(self, session: AsyncSession, owner_id: int, record_id: int) -> ModelT:
        result = await session.execute(
            select(self.model).where(*self._owned(owner_id, record_id))
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise self._not_found()
        return record

    async def update(
        self,
        session: AsyncSession,
        owner_id: int,
        record_id: int,
        fields: dict[str, Any],
    ) -> ModelT:
        """Apply ``fields`` with one conditional UPDATE on ``id AND owner``."""

        values = {k: v for k, v in fields.items() if v is not None}
        unknown = set(values) - self.mutable_fields
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            )
        if not values:
            return await self.get_own(session, owner_id, record_id)

        result = await session.execute(
            update(self.model)
            .where(*self._owned(owner_id, record_id))
            .values(**values)
            .returning(self.model)
        )
        record = result.scalar_one_or_none()
        if record is None:
            await session.rollback()
            raise self._not_found()
        await session.commit()
        logger.info("%s %s updated by account %s", self.label, record_id, owner_id)
        return record

    async def delete(self, session: AsyncSession, owner_id: int, record_id: int) -> None:
        """Delete with one conditional DELETE on ``id AND owner``."""

        result = await session.execute(
            delete(self.model).where(*self._owned(owner_id, record_id))
        )
        if result.rowcount == 0:
            await session.rollback()
            raise self._not_found()
        await session.commit()
        logger.info("%s %s deleted by account %s", self.label, record_id, owner_id)


RECORD_FIELDS = frozenset(
    {"name", "description", "quantity", "price", "image",
     "location_address", "location_lat", "location_lng"}
)

materials = OwnedRecordStore(Material, "Material", mutable_fields=RECORD_FIELDS)
products = OwnedRecordStore(
    Product,
    "Product",
    mutable_fields=frozenset({"name", "description", "quantity", "price", "status"}),
)
purchased_materials = OwnedRecordStore(PurchasedMaterial, "Purchased material")
# Purchases are scoped to the buyer for customers and to the seller for suppliers
buyer_purchases = OwnedRecordStore(Purchase, "Purchase", owner_column=Purchase.buyer_id)
seller_receipts = OwnedRecordStore(Purchase, "Receipt", owner_column=Purchase.seller_id)
