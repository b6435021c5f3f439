"""Dashboard aggregates computed from stored transactions.

All functions are read-only and independent of each other; each takes an
``as_of`` date anchoring its trailing window (defaults to today) so results
are reproducible.

- :func:`monthly_series`: trailing 12 months, recurring vs non-recurring
  sums per ``YYYY-MM``.
- :func:`category_breakdown`: trailing 30 days, total and recurring count per
  category, largest total first.
- :func:`month_category_pivot`: trailing 12 months, dense
  ``category × month`` matrix over every category name.
- :func:`recent_transactions`: the ten most recently dated transactions.

Grouping happens in Python over a single windowed query per aggregate, which
keeps the month bucketing identical across SQLite and Postgres.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session
from tracker_db.client import Store
from tracker_db.models.ledger import Category, Transaction

from .models import (
    CategoryBreakdown,
    DashboardData,
    MonthCategoryPivot,
    MonthlySeries,
    TransactionView,
)
from .transactions import to_view, view_select

_ZERO = Decimal("0")
RECENT_LIMIT = 10


def months_ago(as_of: date, months: int) -> date:
    """Same day ``months`` calendar months earlier, clamped to month end."""

    total = as_of.year * 12 + (as_of.month - 1) - months
    year, month0 = divmod(total, 12)
    month = month0 + 1
    return date(year, month, min(as_of.day, calendar.monthrange(year, month)[1]))


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def _today(as_of: date | None) -> date:
    return as_of if as_of is not None else date.today()


# ---------------------------------------------------------------------------
# Aggregates (session-scoped)
# ---------------------------------------------------------------------------


def _monthly_series(session: Session, as_of: date) -> MonthlySeries:
    start = months_ago(as_of, 12)
    rows = session.execute(
        select(Transaction.date, Transaction.amount, Transaction.recurring).where(
            Transaction.date >= start
        )
    ).all()

    sums: defaultdict[str, list[Decimal]] = defaultdict(lambda: [_ZERO, _ZERO])
    for tx_date, amount, recurring in rows:
        bucket = sums[month_key(tx_date)]
        bucket[0 if recurring else 1] += amount

    labels = tuple(sorted(sums))
    return MonthlySeries(
        labels=labels,
        recurring=tuple(sums[m][0] for m in labels),
        non_recurring=tuple(sums[m][1] for m in labels),
    )


def _category_breakdown(session: Session, as_of: date) -> CategoryBreakdown:
    start = as_of - timedelta(days=30)
    rows = session.execute(
        select(Category.id, Category.name, Transaction.amount, Transaction.recurring)
        .join(Category, Transaction.category_id == Category.id)
        .where(Transaction.date >= start)
    ).all()

    names: dict[int, str] = {}
    totals: defaultdict[int, Decimal] = defaultdict(lambda: _ZERO)
    recurring_counts: defaultdict[int, int] = defaultdict(int)
    for cat_id, name, amount, recurring in rows:
        names[cat_id] = name
        totals[cat_id] += amount
        if recurring:
            recurring_counts[cat_id] += 1

    order = sorted(totals, key=lambda cid: (-totals[cid], names[cid]))
    return CategoryBreakdown(
        labels=tuple(names[c] for c in order),
        totals=tuple(totals[c] for c in order),
        recurring_counts=tuple(recurring_counts[c] for c in order),
    )


def _month_category_pivot(session: Session, as_of: date) -> MonthCategoryPivot:
    start = months_ago(as_of, 12)
    rows = session.execute(
        select(Transaction.date, Transaction.amount, Category.name)
        .outerjoin(Category, Transaction.category_id == Category.id)
        .where(Transaction.date >= start)
    ).all()
    category_names = (
        session.execute(select(Category.name).order_by(Category.name)).scalars().all()
    )

    # Months come from every windowed transaction, categorized or not
    months = tuple(sorted({month_key(tx_date) for tx_date, _, _ in rows}))
    categories = tuple(category_names)
    data: dict[str, dict[str, Decimal]] = {c: dict.fromkeys(months, _ZERO) for c in categories}

    for tx_date, amount, cat_name in rows:
        if cat_name is None:
            continue
        row = data.get(cat_name)
        if row is None:
            continue
        m = month_key(tx_date)
        if m in row:
            row[m] += amount

    return MonthCategoryPivot(months=months, categories=categories, data=data)


def _recent_transactions(
    session: Session, limit: int = RECENT_LIMIT
) -> tuple[TransactionView, ...]:
    stmt = view_select().order_by(Transaction.date.desc(), Transaction.id.desc()).limit(limit)
    return tuple(to_view(tx, v, c) for tx, v, c in session.execute(stmt).all())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def monthly_series(store: Store, *, as_of: date | None = None) -> MonthlySeries:
    with store.session() as session:
        return _monthly_series(session, _today(as_of))


def category_breakdown(store: Store, *, as_of: date | None = None) -> CategoryBreakdown:
    with store.session() as session:
        return _category_breakdown(session, _today(as_of))


def month_category_pivot(store: Store, *, as_of: date | None = None) -> MonthCategoryPivot:
    with store.session() as session:
        return _month_category_pivot(session, _today(as_of))


def recent_transactions(
    store: Store, *, limit: int = RECENT_LIMIT
) -> tuple[TransactionView, ...]:
    with store.session() as session:
        return _recent_transactions(session, limit)


def get_dashboard_data(store: Store, *, as_of: date | None = None) -> DashboardData:
    """Build every dashboard aggregate from one read session."""

    today = _today(as_of)
    with store.session() as session:
        return DashboardData(
            monthly=_monthly_series(session, today),
            categories=_category_breakdown(session, today),
            recent_transactions=_recent_transactions(session),
            month_by_category=_month_category_pivot(session, today),
        )


__all__ = [
    "months_ago",
    "month_key",
    "monthly_series",
    "category_breakdown",
    "month_category_pivot",
    "recent_transactions",
    "get_dashboard_data",
    "RECENT_LIMIT",
]
