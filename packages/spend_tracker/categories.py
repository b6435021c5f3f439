"""Category domain helpers and service operations.

This module centralizes small, server-side validated operations for the
``categories`` table. Every mutation returns a
:class:`~spend_tracker.models.MutationResult` instead of raising so callers
across a request/response boundary always get a structured answer.

Exports
-------
- ``add_category(...)``: create a category with a validated name and color.
- ``update_category_color(...)``: change a category's ``#rrggbb`` color.
- ``delete_category(...)``: delete a category, nulling every reference.
- ``get_categories(...)``: list categories ordered by name.
- ``normalize_name(...)`` and ``validate_name(...)``: shared with the terminal
  UI for early feedback before hitting the database.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tracker_db.client import Store
from tracker_db.models.ledger import DEFAULT_CATEGORY_COLOR, Category, Transaction, Vendor

from .colors import is_valid_color
from .logging_setup import get_logger
from .models import MutationResult, failed, ok

logger = get_logger("spend_tracker.categories")

# ---------------------------
# Name normalization/validation
# ---------------------------


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``."""

    return " ".join(name.strip().split())


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None


def validate_name(name: str | None, *, max_len: int = 64) -> NameValidation:
    n = normalize_name(name or "")
    if not n:
        return NameValidation(False, "Invalid category name")
    if len(n) > max_len:
        return NameValidation(False, f"Name must be at most {max_len} characters")
    return NameValidation(True, None)


# ---------------------------
# Queries
# ---------------------------


@dataclass(frozen=True, slots=True)
class CategoryInfo:
    id: int
    name: str
    parent_id: int | None
    color: str


def get_categories(store: Store) -> list[CategoryInfo]:
    with store.session() as session:
        rows = session.execute(select(Category).order_by(Category.name)).scalars().all()
        return [CategoryInfo(r.id, r.name, r.parent_id, r.color) for r in rows]


# ---------------------------
# Mutations
# ---------------------------


def add_category(
    store: Store,
    name: str,
    parent_id: int | None = None,
    color: str = DEFAULT_CATEGORY_COLOR,
) -> MutationResult:
    """Create a category; returns ``{"success": True, "category_id": id}``.

    Fails (``success=False``) on an empty name, a malformed color, a name that
    already exists (exact match) or an unknown ``parent_id``.
    """

    v = validate_name(name)
    if not v.ok:
        return failed(v.reason or "Invalid category name")
    if not is_valid_color(color):
        return failed("Invalid color format")
    name_n = normalize_name(name)

    try:
        with store.transaction() as session:
            existing = session.execute(
                select(Category.id).where(Category.name == name_n)
            ).scalar_one_or_none()
            if existing is not None:
                return failed("Category with this name already exists")
            if parent_id is not None and session.get(Category, parent_id) is None:
                return failed(f"Parent category not found: {parent_id}")

            row = Category(name=name_n, parent_id=parent_id, color=color)
            session.add(row)
            session.flush()
            category_id = row.id
    except IntegrityError:
        # Lost a race with a concurrent insert of the same name
        return failed("Category with this name already exists")
    except SQLAlchemyError as e:
        logger.warning("add category %r rolled back: %s", name_n, e)
        return failed(str(e))

    logger.info("added category %d %r", category_id, name_n)
    return ok(category_id=category_id)


def update_category_color(store: Store, category_id: int, color: str) -> MutationResult:
    if not is_valid_color(color):
        return failed("Invalid color format")
    try:
        with store.transaction() as session:
            category = session.get(Category, category_id)
            if category is None:
                return failed(f"Category not found: {category_id}")
            category.color = color
    except SQLAlchemyError as e:
        logger.warning("color update for category %s rolled back: %s", category_id, e)
        return failed(str(e))
    return ok()


def delete_category(store: Store, category_id: int) -> MutationResult:
    """Delete a category after nulling every reference to it.

    Transactions and vendors that pointed at the category keep their rows
    with ``category_id = NULL``; child categories become top-level.
    """

    try:
        with store.transaction() as session:
            if session.get(Category, category_id) is None:
                return failed(f"Category not found: {category_id}")
            session.execute(
                update(Transaction)
                .where(Transaction.category_id == category_id)
                .values(category_id=None)
            )
            session.execute(
                update(Vendor).where(Vendor.category_id == category_id).values(category_id=None)
            )
            session.execute(
                update(Category).where(Category.parent_id == category_id).values(parent_id=None)
            )
            # Bulk updates bypass the identity map; drop stale state first
            session.expire_all()
            session.delete(session.get(Category, category_id))
    except SQLAlchemyError as e:
        logger.warning("delete of category %s rolled back: %s", category_id, e)
        return failed(str(e))

    logger.info("deleted category %s", category_id)
    return ok()


__all__ = [
    "normalize_name",
    "validate_name",
    "NameValidation",
    "CategoryInfo",
    "get_categories",
    "add_category",
    "update_category_color",
    "delete_category",
]
