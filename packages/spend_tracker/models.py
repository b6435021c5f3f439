"""Data models and result shapes for ``spend_tracker``.

Records flowing through the pipeline are frozen dataclasses with explicit
field order. Results of user-initiated mutations are plain ``TypedDict``
mappings (``{"success": bool, ...}``) so they cross a request/response
boundary without custom serialization. Listing filters are validated with
pydantic.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import NotRequired, TypedDict

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ---------------------------------------------------------------------------
# Ingestion records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionCandidate:
    """A normalized row produced by the parser, not yet stored.

    ``date`` is an ISO ``YYYY-MM-DD`` string. ``amount`` is a two-decimal
    ``Decimal``; its sign follows the layout's debit/credit rule.
    ``vendor_raw`` is the unprocessed description used to derive the vendor
    key.
    """

    date: str
    vendor_raw: str
    description: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class TransactionView:
    """A stored transaction joined with its vendor and category names."""

    id: int
    date: date
    vendor_id: int
    vendor_name: str
    amount: Decimal
    description: str | None
    category_id: int | None
    category_name: str | None
    recurring: bool
    source_file: str | None


@dataclass(frozen=True, slots=True)
class ImportSummary:
    """Outcome of one ``import_file`` call.

    ``uncategorized_vendor_ids`` lists vendors (first-seen order, no repeats)
    whose new transactions were stored without a category during this import.
    ``pending`` is every uncategorized transaction in the store after the
    import, not just this batch.
    """

    file_name: str
    imported_count: int
    duplicate_count: int
    uncategorized_vendor_ids: tuple[int, ...] = ()
    pending: tuple[TransactionView, ...] = ()


# ---------------------------------------------------------------------------
# Mutation results
# ---------------------------------------------------------------------------


class MutationResult(TypedDict):
    success: bool
    error: NotRequired[str]
    category_id: NotRequired[int]


def ok(**extra: int) -> MutationResult:
    result: MutationResult = {"success": True}
    result.update(extra)  # type: ignore[typeddict-item]
    return result


def failed(error: str) -> MutationResult:
    return {"success": False, "error": error}


# ---------------------------------------------------------------------------
# Dashboard aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MonthlySeries:
    labels: tuple[str, ...]
    recurring: tuple[Decimal, ...]
    non_recurring: tuple[Decimal, ...]


@dataclass(frozen=True, slots=True)
class CategoryBreakdown:
    labels: tuple[str, ...]
    totals: tuple[Decimal, ...]
    recurring_counts: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class MonthCategoryPivot:
    """Dense month×category matrix keyed as ``data[category][month]``.

    Every category in ``categories`` maps to an ordered mapping over every
    month in ``months``; cells without transactions hold ``Decimal("0")``.
    """

    months: tuple[str, ...]
    categories: tuple[str, ...]
    data: Mapping[str, Mapping[str, Decimal]] = field(default_factory=dict)

    def rows(self) -> list[list[Decimal]]:
        """Return the matrix as ``categories × months`` nested lists."""

        return [[self.data[c][m] for m in self.months] for c in self.categories]

    def total(self) -> Decimal:
        return sum((v for row in self.data.values() for v in row.values()), Decimal("0"))


@dataclass(frozen=True, slots=True)
class DashboardData:
    monthly: MonthlySeries
    categories: CategoryBreakdown
    recent_transactions: tuple[TransactionView, ...]
    month_by_category: MonthCategoryPivot


# ---------------------------------------------------------------------------
# Listing filters
# ---------------------------------------------------------------------------


class TransactionFilters(BaseModel):
    """Optional filters for ``get_transactions``; unset fields do not filter."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    start_date: date | None = None
    end_date: date | None = None
    category_id: int | None = None
    vendor_id: int | None = None
    search: str | None = None

    @field_validator("search")
    @classmethod
    def _blank_search_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _range_is_ordered(self) -> TransactionFilters:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


__all__ = [
    "TransactionCandidate",
    "TransactionView",
    "ImportSummary",
    "MutationResult",
    "ok",
    "failed",
    "MonthlySeries",
    "CategoryBreakdown",
    "MonthCategoryPivot",
    "DashboardData",
    "TransactionFilters",
]
