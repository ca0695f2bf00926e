"""Purchase ledger and the manufacturer-side copy of bought materials."""
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, LocationMixin, OwnedRecordMixin


class PurchaseKind(str, Enum):
    MATERIAL = "material"
    PRODUCT = "product"


class Purchase(Base):
    """One completed sale between a buyer and a seller."""

    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    item_name: Mapped[str] = mapped_column(String, nullable=False)
    buyer_id: Mapped[int] = mapped_column(Integer, ForeignKey("accounts.id"), index=True)
    buyer_name: Mapped[str] = mapped_column(String, nullable=False)
    seller_id: Mapped[int] = mapped_column(Integer, ForeignKey("accounts.id"), index=True)
    seller_name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    external_tx_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String, default="completed")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class PurchasedMaterial(OwnedRecordMixin, LocationMixin, Base):
    """Snapshot of a supplier material owned by the manufacturer who bought it."""

    __tablename__ = "purchased_materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Source rows may be deleted later; the snapshot survives
    material_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("materials.id", ondelete="SET NULL"), nullable=True, index=True
    )
    purchase_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("purchases.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    supplier_id: Mapped[int] = mapped_column(Integer, ForeignKey("accounts.id"), index=True)
    supplier_name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    image: Mapped[str] = mapped_column(String, nullable=False)
    external_tx_id: Mapped[str] = mapped_column(String, nullable=False)
