"""Public interface for the ``spend_tracker`` package.

This module exposes the pipeline operations and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import (
    add_category,
    clear_all_data,
    delete_category,
    delete_transaction,
    get_categories,
    get_dashboard_data,
    get_transactions,
    get_uncategorized_transactions,
    import_file,
    import_files,
    submit_categorization,
    update_category_color,
    update_vendor_category,
)
from .errors import FormatError, NotFoundError
from .formats import FORMAT_3, FORMAT_4, LayoutSpec, detect_format
from .models import (
    DashboardData,
    ImportSummary,
    MutationResult,
    TransactionCandidate,
    TransactionFilters,
    TransactionView,
)
from .pending import CategorizationQueue
from .vendors import normalize_vendor

__all__ = [
    # API
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
    # Workflow
    "CategorizationQueue",
    "detect_format",
    "normalize_vendor",
    # Models / types
    "LayoutSpec",
    "FORMAT_3",
    "FORMAT_4",
    "TransactionCandidate",
    "TransactionView",
    "ImportSummary",
    "MutationResult",
    "TransactionFilters",
    "DashboardData",
    # Errors
    "FormatError",
    "NotFoundError",
]
