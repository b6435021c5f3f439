"""tracker_db: storage library for the spend tracker (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``tracker_db.models.ledger`` (re-exported for convenience)
- The explicitly owned ``Store`` handle in ``tracker_db.client``
"""

from __future__ import annotations

from .client import Store
from .models.ledger import (
    DEFAULT_CATEGORY_COLOR,
    Base,
    Category,
    ImportRecord,
    Transaction,
    Vendor,
)

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "Store",
    "Category",
    "Vendor",
    "Transaction",
    "ImportRecord",
    "DEFAULT_CATEGORY_COLOR",
]
