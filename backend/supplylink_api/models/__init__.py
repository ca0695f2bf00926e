"""SQLAlchemy models exposed by the backend."""
from .account import Account, Role
from .base import Base
from .material import Material
from .product import Product, ProductStatus
from .purchase import Purchase, PurchasedMaterial, PurchaseKind

__all__ = [
    "Account",
    "Base",
    "Material",
    "Product",
    "ProductStatus",
    "Purchase",
    "PurchaseKind",
    "PurchasedMaterial",
    "Role",
]
