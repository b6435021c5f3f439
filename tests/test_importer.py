from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import func, select
from tracker_db.client import Store
from tracker_db.models.ledger import ImportRecord, Transaction, Vendor

from spend_tracker import api
from spend_tracker.duplicates import fingerprint, is_duplicate
from spend_tracker.errors import FormatError
from spend_tracker.importer import _resolve_max_workers
from spend_tracker.models import TransactionCandidate
from tests.helpers.db import seed_category, write_format3, write_format4


def _count(store: Store, model) -> int:
    with store.session() as s:
        return s.execute(select(func.count()).select_from(model)).scalar_one()


def test_pos_amazon_row_is_stored_with_vendor_key(store: Store, tmp_path: Path):
    path = write_format3(
        tmp_path / "jan.csv", [("Cleared", "01/15/2024", "POS AMAZON PURCHASE", "42.50", "")]
    )

    summary = api.import_file(store, path)

    assert summary.file_name == "jan.csv"
    assert (summary.imported_count, summary.duplicate_count) == (1, 0)
    [tx] = api.get_transactions(store)
    assert tx.date == date(2024, 1, 15)
    assert tx.vendor_name == "AMAZON"
    assert tx.amount == Decimal("42.50")
    assert tx.description == "POS AMAZON PURCHASE"
    assert tx.category_id is None and tx.recurring is False
    assert tx.source_file == "jan.csv"
    assert summary.uncategorized_vendor_ids == (tx.vendor_id,)
    assert [p.id for p in summary.pending] == [tx.id]


def test_reimport_is_idempotent(store: Store, tmp_path: Path):
    path = write_format3(
        tmp_path / "jan.csv",
        [
            ("Cleared", "01/15/2024", "POS AMAZON PURCHASE", "42.50", ""),
            ("Cleared", "01/16/2024", "NETFLIX.COM", "15.99", ""),
        ],
    )

    first = api.import_file(store, path)
    second = api.import_file(store, path)

    assert (first.imported_count, first.duplicate_count) == (2, 0)
    assert (second.imported_count, second.duplicate_count) == (0, 2)
    assert _count(store, Transaction) == 2
    assert _count(store, Vendor) == 2
    # One history row per call, even when nothing new was stored
    with store.session() as s:
        counts = s.execute(
            select(ImportRecord.transaction_count).order_by(ImportRecord.id)
        ).scalars().all()
    assert counts == [2, 0]


def test_rows_repeated_within_one_file_are_duplicates(store: Store, tmp_path: Path):
    row = ("Cleared", "01/15/2024", "COFFEE", "3.50", "")
    summary = api.import_file(store, write_format3(tmp_path / "dup.csv", [row, row]))
    assert (summary.imported_count, summary.duplicate_count) == (1, 1)


def test_same_vendor_key_different_description_is_not_duplicate(store: Store, tmp_path: Path):
    path = write_format3(
        tmp_path / "a.csv",
        [
            ("Cleared", "01/15/2024", "POS AMAZON PURCHASE", "42.50", ""),
            ("Cleared", "01/15/2024", "AMAZON", "42.50", ""),
        ],
    )
    summary = api.import_file(store, path)
    assert summary.imported_count == 2
    assert _count(store, Vendor) == 1


def test_unknown_format_inserts_nothing(store: Store, tmp_path: Path):
    path = tmp_path / "bad.csv"
    path.write_text("Foo,Bar\n1,2\n", encoding="utf-8")

    with pytest.raises(FormatError):
        api.import_file(store, path)

    assert _count(store, Transaction) == 0
    assert _count(store, ImportRecord) == 0


def test_unrepresentable_rows_are_dropped_and_import_continues(store: Store, tmp_path: Path):
    path = write_format3(
        tmp_path / "odd.csv",
        [
            ("Cleared", "01/15/2024", "COFFEE", "3.50", ""),
            ("Cleared", "01/16/2024", "ODD", "1e30", ""),
            ("Cleared", "\u00b2/01/2024", "SUPERSCRIPT", "2.00", ""),
        ],
    )

    summary = api.import_file(store, path)

    assert (summary.imported_count, summary.duplicate_count) == (1, 0)
    assert [t.vendor_name for t in api.get_transactions(store)] == ["COFFEE"]


def test_missing_file_propagates(store: Store, tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        api.import_file(store, tmp_path / "missing.csv")


def test_known_vendor_gets_its_default_category(store: Store, tmp_path: Path):
    groceries = seed_category(store, "Groceries")
    first = write_format3(tmp_path / "a.csv", [("Cleared", "01/15/2024", "WHOLE FOODS", "80", "")])
    api.import_file(store, first)
    [tx] = api.get_transactions(store)
    assert api.update_vendor_category(store, tx.vendor_id, groceries) == {"success": True}

    second = write_format3(tmp_path / "b.csv", [("Cleared", "02/15/2024", "WHOLE FOODS", "65", "")])
    summary = api.import_file(store, second)

    assert summary.imported_count == 1
    assert summary.uncategorized_vendor_ids == ()
    newest = api.get_transactions(store)[0]
    assert (newest.date, newest.category_id) == (date(2024, 2, 15), groceries)


def test_uncategorized_vendors_listed_once_in_first_seen_order(store: Store, tmp_path: Path):
    path = write_format3(
        tmp_path / "a.csv",
        [
            ("Cleared", "01/01/2024", "ZED", "1", ""),
            ("Cleared", "01/02/2024", "ALPHA", "2", ""),
            ("Cleared", "01/03/2024", "ZED", "3", ""),
        ],
    )
    summary = api.import_file(store, path)
    with store.session() as s:
        names = {v.id: v.name for v in s.execute(select(Vendor)).scalars()}
    assert [names[v] for v in summary.uncategorized_vendor_ids] == ["ZED", "ALPHA"]
    assert len(summary.pending) == 3


def test_import_files_parses_all_before_storing(store: Store, tmp_path: Path):
    good = write_format3(tmp_path / "good.csv", [("Cleared", "01/01/2024", "A", "1", "")])
    bad = tmp_path / "bad.csv"
    bad.write_text("Foo,Bar\n", encoding="utf-8")

    with pytest.raises(FormatError):
        api.import_files(store, [good, bad])
    assert _count(store, Transaction) == 0


def test_import_files_stores_in_given_order(store: Store, tmp_path: Path):
    a = write_format3(tmp_path / "a.csv", [("Cleared", "01/01/2024", "A", "1", "")])
    b = write_format4(tmp_path / "b.csv", [("01/02/2024", "B", "2", "0")])

    summaries = api.import_files(store, [a, b], max_workers=2)

    assert [s.file_name for s in summaries] == ["a.csv", "b.csv"]
    assert len(summaries[-1].pending) == 2


def test_import_files_empty():
    assert api.import_files(None, []) == []  # type: ignore[arg-type]


def test_worker_resolution(monkeypatch: pytest.MonkeyPatch):
    assert _resolve_max_workers(10, None) == 4
    assert _resolve_max_workers(2, None) == 2
    assert _resolve_max_workers(10, 7) == 7
    monkeypatch.setenv("SPEND_TRACKER_IMPORT_WORKERS", "3")
    assert _resolve_max_workers(10, None) == 3
    monkeypatch.setenv("SPEND_TRACKER_IMPORT_WORKERS", "lots")
    assert _resolve_max_workers(10, None) == 4


def test_is_duplicate_matches_exact_fingerprint(store: Store, tmp_path: Path):
    api.import_file(
        store, write_format3(tmp_path / "a.csv", [("Cleared", "01/15/2024", "COFFEE", "3.50", "")])
    )
    same = TransactionCandidate("2024-01-15", "COFFEE", "COFFEE", Decimal("3.50"))
    other_amount = TransactionCandidate("2024-01-15", "COFFEE", "COFFEE", Decimal("3.51"))
    other_day = TransactionCandidate("2024-01-16", "COFFEE", "COFFEE", Decimal("3.50"))

    with store.session() as s:
        assert is_duplicate(s, same, "COFFEE")
        assert not is_duplicate(s, other_amount, "COFFEE")
        assert not is_duplicate(s, other_day, "COFFEE")
        assert not is_duplicate(s, same, "TEA")

    assert fingerprint(same, "COFFEE") == ("2024-01-15", "COFFEE", "COFFEE", "3.50")
