"""Raw material listed by a supplier."""
from sqlalchemy import CheckConstraint, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, LocationMixin, OwnedRecordMixin


class Material(OwnedRecordMixin, LocationMixin, Base):
    """Supplier inventory; owned by the supplier that listed it."""

    __tablename__ = "materials"

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
    external_tx_id: Mapped[str | None] = mapped_column(String, nullable=True)
