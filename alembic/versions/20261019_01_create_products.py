"""Create products table for cached expiry answers."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("expiry_info", sa.Text(), nullable=False),
        sa.Column("expiry_date", sa.String(length=10)),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("name", name="uq_products_name"),
    )
    op.create_index("ix_products_expiry_date", "products", ["expiry_date"])


def downgrade() -> None:
    op.drop_index("ix_products_expiry_date", table_name="products")
    op.drop_table("products")
