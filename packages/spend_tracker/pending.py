"""Pending-categorization workflow.

After an import, every uncategorized transaction is presented one at a time.
Submitting a decision for the head of the queue:

(a) sets the transaction's category and recurring flag,
(b) makes that category the vendor's default so future imports of the vendor
    are categorized automatically,
(c) gives the category a pastel color when it has none yet.

All three happen in one store transaction. On any failure nothing is applied
and the queue keeps the transaction at its head for a retry.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from tracker_db.client import Store
from tracker_db.models.ledger import Category, Transaction, Vendor

from .colors import ColorStrategy, PastelColorStrategy
from .errors import NotFoundError
from .logging_setup import get_logger
from .models import MutationResult, TransactionView, failed, ok
from .transactions import list_uncategorized

logger = get_logger("spend_tracker.pending")


def categorize_transaction(
    store: Store,
    transaction_id: int,
    category_id: int,
    recurring: bool,
    *,
    color_strategy: ColorStrategy | None = None,
) -> MutationResult:
    """Apply a user's category decision to a transaction and its vendor.

    Returns ``{"success": True}`` or ``{"success": False, "error": ...}``;
    store errors are rolled back and reported, never raised.
    """

    pick_color = color_strategy or PastelColorStrategy()
    try:
        with store.transaction() as session:
            tx = session.get(Transaction, transaction_id)
            if tx is None:
                raise NotFoundError("Transaction", transaction_id)
            category = session.get(Category, category_id)
            if category is None:
                raise NotFoundError("Category", category_id)

            tx.category_id = category_id
            tx.recurring = bool(recurring)

            vendor = session.get(Vendor, tx.vendor_id)
            if vendor is None:  # pragma: no cover - FK guarantees presence
                raise NotFoundError("Vendor", tx.vendor_id)
            vendor.category_id = category_id

            if not category.color:
                category.color = pick_color()
                logger.debug("assigned color %s to category %r", category.color, category.name)
    except NotFoundError as e:
        return failed(str(e))
    except SQLAlchemyError as e:
        logger.warning("categorization of transaction %s rolled back: %s", transaction_id, e)
        return failed(str(e))

    logger.info(
        "categorized transaction %s as category %s (recurring=%s)",
        transaction_id,
        category_id,
        bool(recurring),
    )
    return ok()


class CategorizationQueue:
    """Single-consumer queue of transactions awaiting a category decision.

    The queue is a process-local snapshot; it is not persisted and does not
    observe later store changes. Only the head can be decided.
    """

    def __init__(
        self,
        store: Store,
        items: Iterable[TransactionView],
        *,
        color_strategy: ColorStrategy | None = None,
    ) -> None:
        self._store = store
        self._items: deque[TransactionView] = deque(items)
        self._color_strategy = color_strategy or PastelColorStrategy()

    @classmethod
    def load(
        cls, store: Store, *, color_strategy: ColorStrategy | None = None
    ) -> CategorizationQueue:
        """Build a queue from every uncategorized transaction in the store."""

        with store.session() as session:
            items = list_uncategorized(session)
        return cls(store, items, color_strategy=color_strategy)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def peek(self) -> TransactionView | None:
        return self._items[0] if self._items else None

    def remaining(self) -> list[TransactionView]:
        return list(self._items)

    def submit(self, category_id: int, recurring: bool) -> MutationResult:
        """Decide the head transaction; advance only when the write succeeded."""

        head = self.peek()
        if head is None:
            return failed("No pending transactions")
        result = categorize_transaction(
            self._store,
            head.id,
            category_id,
            recurring,
            color_strategy=self._color_strategy,
        )
        if result["success"]:
            self._items.popleft()
        return result


__all__ = ["categorize_transaction", "CategorizationQueue"]
