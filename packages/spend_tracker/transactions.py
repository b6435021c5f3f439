"""Transaction listing, deletion and bulk clearing.

Listing joins vendor and category display names onto each row and returns
:class:`~spend_tracker.models.TransactionView` records, newest first.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Select, delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from tracker_db.client import Store
from tracker_db.models.ledger import Category, ImportRecord, Transaction, Vendor

from .logging_setup import get_logger
from .models import MutationResult, TransactionFilters, TransactionView, failed, ok

logger = get_logger("spend_tracker.transactions")


def view_select() -> Select:
    """Base ``SELECT`` for transaction views (vendor inner, category outer join)."""

    return (
        select(
            Transaction,
            Vendor.name.label("vendor_name"),
            Category.name.label("category_name"),
        )
        .join(Vendor, Transaction.vendor_id == Vendor.id)
        .outerjoin(Category, Transaction.category_id == Category.id)
    )


def to_view(tx: Transaction, vendor_name: str, category_name: str | None) -> TransactionView:
    return TransactionView(
        id=tx.id,
        date=tx.date,
        vendor_id=tx.vendor_id,
        vendor_name=vendor_name,
        amount=tx.amount,
        description=tx.description,
        category_id=tx.category_id,
        category_name=category_name,
        recurring=bool(tx.recurring),
        source_file=tx.source_file,
    )


def _views(session: Session, stmt: Select) -> list[TransactionView]:
    return [to_view(tx, vname, cname) for tx, vname, cname in session.execute(stmt).all()]


def list_uncategorized(session: Session) -> list[TransactionView]:
    """All transactions without a category, newest first (system-wide)."""

    stmt = (
        view_select()
        .where(Transaction.category_id.is_(None))
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )
    return _views(session, stmt)


def get_uncategorized_transactions(store: Store) -> list[TransactionView]:
    with store.session() as session:
        return list_uncategorized(session)


def get_transactions(
    store: Store,
    filters: TransactionFilters | Mapping[str, Any] | None = None,
) -> list[TransactionView]:
    """List transactions matching ``filters``, newest first.

    ``filters`` accepts a :class:`TransactionFilters` or a plain mapping with
    the same keys (``start_date``, ``end_date``, ``category_id``,
    ``vendor_id``, ``search``). ``search`` is a substring match against the
    vendor name or the description. Date bounds are inclusive.
    """

    if filters is None:
        f = TransactionFilters()
    elif isinstance(filters, TransactionFilters):
        f = filters
    else:
        f = TransactionFilters.model_validate(dict(filters))

    stmt = view_select()
    if f.start_date is not None:
        stmt = stmt.where(Transaction.date >= f.start_date)
    if f.end_date is not None:
        stmt = stmt.where(Transaction.date <= f.end_date)
    if f.category_id is not None:
        stmt = stmt.where(Transaction.category_id == f.category_id)
    if f.vendor_id is not None:
        stmt = stmt.where(Transaction.vendor_id == f.vendor_id)
    if f.search is not None:
        stmt = stmt.where(
            or_(
                Vendor.name.contains(f.search, autoescape=True),
                Transaction.description.contains(f.search, autoescape=True),
            )
        )
    stmt = stmt.order_by(Transaction.date.desc(), Transaction.id.desc())

    with store.session() as session:
        return _views(session, stmt)


def delete_transaction(store: Store, transaction_id: int) -> MutationResult:
    """Delete one transaction by id; vendors and categories are untouched."""

    try:
        with store.transaction() as session:
            tx = session.get(Transaction, transaction_id)
            if tx is None:
                return failed(f"Transaction not found: {transaction_id}")
            session.delete(tx)
    except SQLAlchemyError as e:
        logger.warning("delete of transaction %s rolled back: %s", transaction_id, e)
        return failed(str(e))
    logger.info("deleted transaction %s", transaction_id)
    return ok()


def clear_all_data(store: Store) -> MutationResult:
    """Remove every transaction, vendor, category and import record.

    Vendors are cleared along with categories because they reference
    categories through an enforced foreign key. Import history goes too so a
    cleared store looks like a fresh one.
    """

    try:
        with store.transaction() as session:
            session.execute(delete(Transaction))
            session.execute(delete(Vendor))
            # Children before parents for the self-referential FK
            session.execute(delete(Category).where(Category.parent_id.is_not(None)))
            session.execute(delete(Category))
            session.execute(delete(ImportRecord))
    except SQLAlchemyError as e:
        logger.warning("clear-all rolled back: %s", e)
        return failed(str(e))
    logger.info("cleared all data")
    return ok()


__all__ = [
    "view_select",
    "to_view",
    "list_uncategorized",
    "get_uncategorized_transactions",
    "get_transactions",
    "delete_transaction",
    "clear_all_data",
]
