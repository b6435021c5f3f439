"""ORM models registry for the spend tracker database."""

from .ledger import DEFAULT_CATEGORY_COLOR, Base, Category, ImportRecord, Transaction, Vendor

__all__ = [
    "Base",
    "Category",
    "Vendor",
    "Transaction",
    "ImportRecord",
    "DEFAULT_CATEGORY_COLOR",
]
