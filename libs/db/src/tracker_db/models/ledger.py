from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    false,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

DEFAULT_CATEGORY_COLOR = "#e0e0e0"


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: categories
# ---------------------------


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    # Optional parent reference forming a tree. Deleting a parent nulls this out
    # in the service layer; there is no ON DELETE clause.
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=True
    )
    color: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=DEFAULT_CATEGORY_COLOR,
        server_default=text(f"'{DEFAULT_CATEGORY_COLOR}'"),
    )


# ---------------------------
# Reference: vendors
# ---------------------------


class Vendor(Base):
    __tablename__ = "vendors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Normalized vendor key (see spend_tracker.vendors.normalize_vendor).
    # Equality is exact and case-sensitive.
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    # Default category applied to future imports of this vendor.
    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=True
    )


# ---------------------------
# Core: transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    vendor_id: Mapped[int] = mapped_column(Integer, ForeignKey("vendors.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=True
    )
    recurring: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    source_file: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        # Duplicate lookups filter on (date, vendor, amount) before comparing
        # the description text.
        Index("ix_transactions_fingerprint", "date", "vendor_id", "amount"),
        Index("ix_transactions_date", "date"),
        Index("ix_transactions_category_id", "category_id"),
    )


# ---------------------------
# Provenance: import_history
# ---------------------------


class ImportRecord(Base):
    __tablename__ = "import_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    import_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False)


__all__ = [
    "Base",
    "Category",
    "Vendor",
    "Transaction",
    "ImportRecord",
    "DEFAULT_CATEGORY_COLOR",
]
