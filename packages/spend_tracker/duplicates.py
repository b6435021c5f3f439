"""Exact-match duplicate detection against stored transactions.

A candidate is a duplicate when a stored transaction has the same
fingerprint: ``(date, vendor name, description, amount)``. Matching is exact
(string/numeric equality) and runs as a single indexed query; nothing is
loaded into memory.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session
from tracker_db.models.ledger import Transaction, Vendor

from .models import TransactionCandidate


def fingerprint(candidate: TransactionCandidate, vendor_key: str) -> tuple[str, str, str, str]:
    """Return the comparable fingerprint tuple for a candidate."""

    return (candidate.date, vendor_key, candidate.description, f"{candidate.amount:.2f}")


def is_duplicate(session: Session, candidate: TransactionCandidate, vendor_key: str) -> bool:
    """Return True when a stored transaction shares the candidate's fingerprint."""

    stmt = (
        select(Transaction.id)
        .join(Vendor, Transaction.vendor_id == Vendor.id)
        .where(
            Transaction.date == date.fromisoformat(candidate.date),
            Vendor.name == vendor_key,
            Transaction.description == candidate.description,
            Transaction.amount == candidate.amount,
        )
        .limit(1)
    )
    return session.execute(stmt).first() is not None


__all__ = ["fingerprint", "is_duplicate"]
