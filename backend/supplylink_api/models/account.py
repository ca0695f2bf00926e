"""Account model: identity, hashed secret and role."""
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Role(str, Enum):
    """Closed set of roles an account may hold."""

    ADMIN = "admin"
    SUPPLIER = "supplier"
    MANUFACTURER = "manufacturer"
    CUSTOMER = "customer"


class Account(Base):
    """Registered marketplace participant."""

    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'supplier', 'manufacturer', 'customer')",
            name="role_allowed",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    organization: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, default=Role.SUPPLIER.value, index=True)
    wallet_address: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
