"""Schéma initial : catalogue, clients, devis, lignes, révisions

Revision ID: 0001_initial_schema
Revises:
Create Date: 2024-05-01 10:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("createdat", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updatedat", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("isactive", sa.Boolean(), nullable=False),
        sa.Column("parentid", sa.String(36), sa.ForeignKey("categories.id")),
        *_timestamps(),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("itemcode", sa.String(50)),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("categoryid", sa.String(36), sa.ForeignKey("categories.id")),
        sa.Column("baserate", sa.Numeric(14, 2), nullable=False),
        sa.Column("unit", sa.String(20)),
        sa.Column("imageurl", sa.String()),
        sa.Column("isactive", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_products_itemcode", "products", ["itemcode"])

    op.create_table(
        "clients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String()),
        sa.Column("phone", sa.String()),
        sa.Column("company", sa.String()),
        sa.Column("address", sa.Text()),
        sa.Column("isactive", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "quotes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("quotenumber", sa.String(20), nullable=False, unique=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("clientid", sa.String(36), sa.ForeignKey("clients.id")),
        sa.Column("discountmode", sa.String(10), nullable=False),
        sa.Column("overalldiscount", sa.Numeric(7, 3), nullable=False),
        sa.Column("taxrate", sa.Numeric(7, 3), nullable=False),
        sa.Column("subtotal", sa.Numeric(14, 2), nullable=False),
        sa.Column("discount", sa.Numeric(14, 2), nullable=False),
        sa.Column("tax", sa.Numeric(14, 2), nullable=False),
        sa.Column("grandtotal", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("version", sa.Integer()),
        sa.Column("isapproved", sa.Boolean(), nullable=False),
        sa.Column("approvedby", sa.String()),
        sa.Column("approvedat", sa.DateTime(timezone=True)),
        sa.Column("approvalnotes", sa.Text()),
        sa.Column("createdby", sa.String()),
        *_timestamps(),
    )
    op.create_index("ix_quotes_status", "quotes", ["status"])

    op.create_table(
        "quote_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("quoteid", sa.String(36), sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("productid", sa.String(36), sa.ForeignKey("products.id")),
        sa.Column("description", sa.Text()),
        sa.Column("quantity", sa.Numeric(14, 3), nullable=False),
        sa.Column("rate", sa.Numeric(14, 2), nullable=False),
        sa.Column("discount", sa.Numeric(7, 3), nullable=False),
        sa.Column("linetotal", sa.Numeric(14, 2), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("dimensions", sa.JSON()),
        *_timestamps(),
    )
    op.create_index("ix_quote_items_quoteid", "quote_items", ["quoteid"])

    op.create_table(
        "quote_revisions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("quoteid", sa.String(36), sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("exported_by", sa.String()),
        sa.Column("exported_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("changes", sa.Text()),
        sa.Column("notes", sa.Text()),
    )
    op.create_index("ix_quote_revisions_quoteid", "quote_revisions", ["quoteid"])
    op.create_index("ix_quote_revisions_exported_at", "quote_revisions", ["exported_at"])


def downgrade() -> None:
    op.drop_table("quote_revisions")
    op.drop_table("quote_items")
    op.drop_table("quotes")
    op.drop_table("clients")
    op.drop_table("products")
    op.drop_table("categories")
