"""Vendor key normalization and vendor→category resolution.

``normalize_vendor`` turns a free-text bank description into the vendor key
stored in ``vendors.name``. The resolver helpers run inside a caller-owned
session so they share the importer's per-row transaction.
"""

from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from tracker_db.client import Store
from tracker_db.models.ledger import Category, Vendor

from .logging_setup import get_logger
from .models import MutationResult, failed, ok

logger = get_logger("spend_tracker.vendors")

# ---------------------------
# Normalization
# ---------------------------

# Applied once each, in this order.
_LEADING = (
    re.compile(r"^POS\s+", re.IGNORECASE),
    re.compile(r"^PURCHASE\s+", re.IGNORECASE),
    re.compile(r"^DEBIT\s+", re.IGNORECASE),
)
_TRAILING = (
    re.compile(r"\s+PURCHASE$", re.IGNORECASE),
    re.compile(r"\s+DEBIT$", re.IGNORECASE),
)
_DATE_LIKE = (
    re.compile(r"\d{2}/\d{2}/\d{2,4}"),
    re.compile(r"\d{2}-\d{2}-\d{2,4}"),
)
# Card numbers and other long reference ids
_LONG_DIGITS = re.compile(r"\d{16,}")


def normalize_vendor(description: str) -> str:
    """Return the canonical vendor key for a transaction description.

    Examples
    --------
    >>> normalize_vendor("POS AMAZON PURCHASE")
    'AMAZON'
    >>> normalize_vendor("DEBIT  NETFLIX.COM 01/15/24")
    'NETFLIX.COM'

    When stripping leaves nothing (e.g. the description is just ``"POS"``),
    the trimmed, whitespace-collapsed description is returned instead so a key
    is never empty.
    """

    s = description
    for pat in _LEADING:
        s = pat.sub("", s)
    for pat in _TRAILING:
        s = pat.sub("", s)
    s = s.strip()
    for pat in _DATE_LIKE:
        s = pat.sub("", s)
    s = _LONG_DIGITS.sub("", s)
    s = " ".join(s.split())
    if not s:
        return " ".join(description.split())
    return s


# ---------------------------
# Resolution (session-scoped)
# ---------------------------


def resolve_vendor(session: Session, name: str) -> int:
    """Return the id of the vendor named ``name``, creating it when absent.

    This is the only path that creates vendors. New vendors start without a
    default category.
    """

    vendor_id = session.execute(select(Vendor.id).where(Vendor.name == name)).scalar_one_or_none()
    if vendor_id is not None:
        return vendor_id
    vendor = Vendor(name=name, category_id=None)
    session.add(vendor)
    session.flush()
    logger.debug("created vendor %d %r", vendor.id, name)
    return vendor.id


def default_category_for(session: Session, vendor_id: int) -> int | None:
    """Return the vendor's current default category id (``None`` if unset)."""

    return session.execute(
        select(Vendor.category_id).where(Vendor.id == vendor_id)
    ).scalar_one_or_none()


# ---------------------------
# Service operation
# ---------------------------


def update_vendor_category(
    store: Store, vendor_id: int, category_id: int | None
) -> MutationResult:
    """Set (or clear, with ``None``) a vendor's default category."""

    try:
        with store.transaction() as session:
            vendor = session.get(Vendor, vendor_id)
            if vendor is None:
                return failed(f"Vendor not found: {vendor_id}")
            if category_id is not None and session.get(Category, category_id) is None:
                return failed(f"Category not found: {category_id}")
            vendor.category_id = category_id
    except SQLAlchemyError as e:
        logger.warning("vendor category update rolled back for vendor %s: %s", vendor_id, e)
        return failed(str(e))
    return ok()


__all__ = [
    "normalize_vendor",
    "resolve_vendor",
    "default_category_for",
    "update_vendor_category",
]
