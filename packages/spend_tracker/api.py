"""Pipeline operations consumed by the presentation layer.

Every function takes the owning :class:`~tracker_db.client.Store` as its first
argument; there is no ambient database handle. Mutation endpoints return a
``{"success": bool, "error"?: str}`` mapping rather than raising, while
:func:`import_file` propagates fatal errors (unreadable file, unknown layout)
to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from os import PathLike
from typing import Any

from tracker_db.client import Store
from tracker_db.models.ledger import DEFAULT_CATEGORY_COLOR

from . import categories as _categories
from . import dashboard as _dashboard
from . import importer as _importer
from . import transactions as _transactions
from . import vendors as _vendors
from .categories import CategoryInfo
from .colors import ColorStrategy
from .models import (
    DashboardData,
    ImportSummary,
    MutationResult,
    TransactionFilters,
    TransactionView,
)
from .pending import categorize_transaction


def import_file(store: Store, path: str | PathLike[str]) -> ImportSummary:
    """Import a statement CSV; see :func:`spend_tracker.importer.import_file`."""

    return _importer.import_file(store, path)


def import_files(
    store: Store, paths: list[str | PathLike[str]], *, max_workers: int | None = None
) -> list[ImportSummary]:
    return _importer.import_files(store, paths, max_workers=max_workers)


def get_uncategorized_transactions(store: Store) -> list[TransactionView]:
    return _transactions.get_uncategorized_transactions(store)


def submit_categorization(
    store: Store,
    transaction_id: int,
    category_id: int,
    recurring: bool,
    *,
    color_strategy: ColorStrategy | None = None,
) -> MutationResult:
    """Categorize one transaction and make the category its vendor's default."""

    return categorize_transaction(
        store, transaction_id, category_id, recurring, color_strategy=color_strategy
    )


def get_dashboard_data(store: Store, *, as_of: date | None = None) -> DashboardData:
    return _dashboard.get_dashboard_data(store, as_of=as_of)


def get_transactions(
    store: Store, filters: TransactionFilters | Mapping[str, Any] | None = None
) -> list[TransactionView]:
    return _transactions.get_transactions(store, filters)


def get_categories(store: Store) -> list[CategoryInfo]:
    return _categories.get_categories(store)


def add_category(
    store: Store,
    name: str,
    parent_id: int | None = None,
    color: str = DEFAULT_CATEGORY_COLOR,
) -> MutationResult:
    return _categories.add_category(store, name, parent_id, color)


def update_category_color(store: Store, category_id: int, color: str) -> MutationResult:
    return _categories.update_category_color(store, category_id, color)


def delete_category(store: Store, category_id: int) -> MutationResult:
    return _categories.delete_category(store, category_id)


def update_vendor_category(
    store: Store, vendor_id: int, category_id: int | None
) -> MutationResult:
    return _vendors.update_vendor_category(store, vendor_id, category_id)


def delete_transaction(store: Store, transaction_id: int) -> MutationResult:
    return _transactions.delete_transaction(store, transaction_id)


def clear_all_data(store: Store) -> MutationResult:
    return _transactions.clear_all_data(store)


__all__ = [
    "import_file",
    "import_files",
    "get_uncategorized_transactions",
    "submit_categorization",
    "get_dashboard_data",
    "get_transactions",
    "get_categories",
    "add_category",
    "update_category_color",
    "delete_category",
    "update_vendor_category",
    "delete_transaction",
    "clear_all_data",
]
