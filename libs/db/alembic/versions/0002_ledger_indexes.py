# ruff: noqa: I001
"""Lookup indexes for duplicate detection and dashboard windows.

Also backfills any empty category color to the default swatch.

Revision ID: 0002_ledger_indexes
Revises: 0001_ledger_core
Create Date: 2024-02-10
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_ledger_indexes"
down_revision: str | None = "0001_ledger_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Duplicate checks filter on (date, vendor, amount) before comparing text
    op.create_index(
        "ix_transactions_fingerprint",
        "transactions",
        ["date", "vendor_id", "amount"],
        unique=False,
    )
    op.create_index("ix_transactions_date", "transactions", ["date"], unique=False)
    op.create_index(
        "ix_transactions_category_id", "transactions", ["category_id"], unique=False
    )

    op.execute(
        sa.text(
            "UPDATE categories SET color = '#e0e0e0' WHERE color IS NULL OR color = ''"
        )
    )


def downgrade() -> None:
    op.drop_index("ix_transactions_category_id", table_name="transactions")
    op.drop_index("ix_transactions_date", table_name="transactions")
    op.drop_index("ix_transactions_fingerprint", table_name="transactions")
