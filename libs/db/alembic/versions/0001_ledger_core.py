# ruff: noqa: I001
"""Ledger core tables: categories, vendors, transactions, import history.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2024-02-03
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column(
            "color",
            sa.String(),
            nullable=False,
            server_default=sa.text("'#e0e0e0'"),
        ),
        sa.ForeignKeyConstraint(["parent_id"], ["categories.id"], name="fk_categories_parent"),
    )

    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], name="fk_vendors_category"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("source_file", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"], name="fk_transactions_vendor"),
        sa.ForeignKeyConstraint(
            ["category_id"], ["categories.id"], name="fk_transactions_category"
        ),
    )

    op.create_table(
        "import_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("import_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("transaction_count", sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("import_history")
    op.drop_table("transactions")
    op.drop_table("vendors")
    op.drop_table("categories")
