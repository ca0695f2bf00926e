"""create accounts, materials, purchases, purchased materials and products"""
from alembic import op
import sqlalchemy as sa

revision = "0001_create_marketplace_tables"
down_revision = None
branch_labels = None
depends_on = None


def _owned_columns() -> list[sa.Column]:
    return [
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("owner_name", sa.String(), nullable=False),
        sa.Column("organization", sa.String(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("location_address", sa.String(), nullable=True),
        sa.Column("location_lat", sa.Float(), nullable=True),
        sa.Column("location_lng", sa.Float(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("organization", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="supplier"),
        sa.Column("wallet_address", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "role IN ('admin', 'supplier', 'manufacturer', 'customer')",
            name="role_allowed",
        ),
    )
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)
    op.create_index("ix_accounts_role", "accounts", ["role"])

    op.create_table(
        "materials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.Column("external_tx_id", sa.String(), nullable=True),
        *_owned_columns(),
        sa.CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        sa.CheckConstraint("price >= 0", name="price_non_negative"),
    )
    op.create_index("ix_materials_owner_id", "materials", ["owner_id"])
    op.create_index("ix_materials_created_at", "materials", ["created_at"])

    op.create_table(
        "purchases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("item_name", sa.String(), nullable=False),
        sa.Column("buyer_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("buyer_name", sa.String(), nullable=False),
        sa.Column("seller_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("seller_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("external_tx_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="completed"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_purchases_buyer_id", "purchases", ["buyer_id"])
    op.create_index("ix_purchases_seller_id", "purchases", ["seller_id"])
    op.create_index("ix_purchases_external_tx_id", "purchases", ["external_tx_id"])
    op.create_index("ix_purchases_created_at", "purchases", ["created_at"])

    op.create_table(
        "purchased_materials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "material_id",
            sa.Integer(),
            sa.ForeignKey("materials.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "purchase_id",
            sa.Integer(),
            sa.ForeignKey("purchases.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("supplier_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.Column("external_tx_id", sa.String(), nullable=False),
        *_owned_columns(),
    )
    op.create_index("ix_purchased_materials_owner_id", "purchased_materials", ["owner_id"])
    op.create_index("ix_purchased_materials_supplier_id", "purchased_materials", ["supplier_id"])
    op.create_index("ix_purchased_materials_material_id", "purchased_materials", ["material_id"])
    op.create_index("ix_purchased_materials_created_at", "purchased_materials", ["created_at"])

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.Column(
            "material_id", sa.Integer(), sa.ForeignKey("purchased_materials.id"), nullable=False
        ),
        sa.Column("external_tx_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        *_owned_columns(),
        sa.CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        sa.CheckConstraint("price >= 0", name="price_non_negative"),
    )
    op.create_index("ix_products_owner_id", "products", ["owner_id"])
    op.create_index("ix_products_material_id", "products", ["material_id"])
    op.create_index("ix_products_external_tx_id", "products", ["external_tx_id"])
    op.create_index("ix_products_created_at", "products", ["created_at"])


def downgrade() -> None:
    op.drop_table("products")
    op.drop_table("purchased_materials")
    op.drop_table("purchases")
    op.drop_table("materials")
    op.drop_index("ix_accounts_role", table_name="accounts")
    op.drop_index("ix_accounts_email", table_name="accounts")
    op.drop_table("accounts")
