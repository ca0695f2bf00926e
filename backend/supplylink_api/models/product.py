"""Finished product derived by a manufacturer from a purchased material."""
from enum import Enum

from sqlalchemy import CheckConstraint, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, LocationMixin, OwnedRecordMixin


class ProductStatus(str, Enum):
    ACTIVE = "active"
    SOLD_OUT = "sold_out"
    DISCONTINUED = "discontinued"


class Product(OwnedRecordMixin, LocationMixin, Base):
    """Manufacturer product created by the correlated finalize call."""

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("price >= 0", name="price_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    image: Mapped[str] = mapped_column(String, nullable=False)
    material_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("purchased_materials.id"), nullable=False, index=True
    )
    # Stored verbatim; deliberately not unique
    external_tx_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    status: Mapped[str] = mapped_column(String, default=ProductStatus.ACTIVE.value)
