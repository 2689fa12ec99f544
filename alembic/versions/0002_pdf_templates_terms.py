"""Modèles PDF et conditions générales

Revision ID: 0002_pdf_templates_terms
Revises: 0001_initial_schema
Create Date: 2024-06-10 09:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0002_pdf_templates_terms"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("createdat", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updatedat", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "pdf_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("companyname", sa.String()),
        sa.Column("accentcolor", sa.String(7)),
        sa.Column("headerbg", sa.String(7)),
        sa.Column("footertext", sa.Text()),
        sa.Column("currencysymbol", sa.String(10)),
        sa.Column("isdefault", sa.Boolean(), nullable=False),
        sa.Column("createdby", sa.String()),
        *_timestamps(),
    )
    op.create_index("ix_pdf_templates_isdefault", "pdf_templates", ["isdefault"])

    op.create_table(
        "terms_conditions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("terms_conditions")
    op.drop_index("ix_pdf_templates_isdefault", table_name="pdf_templates")
    op.drop_table("pdf_templates")
