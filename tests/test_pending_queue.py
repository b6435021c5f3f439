from __future__ import annotations

from pathlib import Path

from sqlalchemy import select
from tracker_db.client import Store
from tracker_db.models.ledger import Category, Vendor

from spend_tracker import api
from spend_tracker.colors import PastelColorStrategy
from spend_tracker.pending import CategorizationQueue, categorize_transaction
from tests.helpers.db import seed_category, write_format3


def _import(store: Store, tmp_path: Path, rows, name: str = "stmt.csv"):
    return api.import_file(store, write_format3(tmp_path / name, rows))


def test_submission_updates_transaction_and_vendor_default(store: Store, tmp_path: Path):
    _import(store, tmp_path, [("Cleared", "01/15/2024", "POS AMAZON PURCHASE", "42.50", "")])
    shopping = seed_category(store, "Shopping")
    queue = CategorizationQueue.load(store)
    head = queue.peek()
    assert head is not None

    result = queue.submit(shopping, True)

    assert result == {"success": True}
    assert len(queue) == 0 and not queue
    [tx] = api.get_transactions(store)
    assert (tx.category_id, tx.category_name, tx.recurring) == (shopping, "Shopping", True)
    with store.session() as s:
        assert s.get(Vendor, head.vendor_id).category_id == shopping


def test_vendor_default_applies_to_later_imports(store: Store, tmp_path: Path):
    _import(
        store, tmp_path, [("Cleared", "01/15/2024", "POS AMAZON PURCHASE", "42.50", "")], "a.csv"
    )
    shopping = seed_category(store, "Shopping")
    CategorizationQueue.load(store).submit(shopping, False)

    summary = _import(
        store, tmp_path, [("Cleared", "02/15/2024", "AMAZON PURCHASE", "10.00", "")], "b.csv"
    )

    assert summary.pending == ()
    assert all(t.category_id == shopping for t in api.get_transactions(store))


def test_queue_is_newest_first_and_advances_in_order(store: Store, tmp_path: Path):
    _import(
        store,
        tmp_path,
        [
            ("Cleared", "01/01/2024", "OLD", "1", ""),
            ("Cleared", "03/01/2024", "NEW", "2", ""),
            ("Cleared", "02/01/2024", "MID", "3", ""),
        ],
    )
    cat = seed_category(store, "Misc")
    queue = CategorizationQueue.load(store)
    assert [t.vendor_name for t in queue.remaining()] == ["NEW", "MID", "OLD"]

    queue.submit(cat, False)
    assert queue.peek().vendor_name == "MID"


def test_failed_submission_keeps_head(store: Store, tmp_path: Path):
    _import(store, tmp_path, [("Cleared", "01/15/2024", "COFFEE", "3.50", "")])
    queue = CategorizationQueue.load(store)
    head = queue.peek()

    result = queue.submit(9999, False)

    assert result["success"] is False
    assert result["error"] == "Category not found: 9999"
    assert queue.peek() == head
    [tx] = api.get_transactions(store)
    assert tx.category_id is None
    with store.session() as s:
        assert s.get(Vendor, tx.vendor_id).category_id is None


def test_store_error_rolls_back_every_change(store: Store, tmp_path: Path):
    _import(store, tmp_path, [("Cleared", "01/15/2024", "COFFEE", "3.50", "")])
    cat = seed_category(store, "Coffee")
    with store.transaction() as s:
        s.get(Category, cat).color = ""

    def _boom() -> str:
        from sqlalchemy.exc import OperationalError

        raise OperationalError("UPDATE categories", {}, Exception("disk I/O error"))

    queue = CategorizationQueue.load(store, color_strategy=_boom)
    result = queue.submit(cat, True)

    assert result["success"] is False
    assert "disk I/O error" in result["error"]
    assert len(queue) == 1
    [tx] = api.get_transactions(store)
    assert (tx.category_id, tx.recurring) == (None, False)
    with store.session() as s:
        assert s.get(Vendor, tx.vendor_id).category_id is None
        assert s.get(Category, cat).color == ""


def test_empty_color_gets_seeded_pastel(store: Store, tmp_path: Path):
    _import(store, tmp_path, [("Cleared", "01/15/2024", "COFFEE", "3.50", "")])
    cat = seed_category(store, "Coffee")
    with store.transaction() as s:
        s.get(Category, cat).color = ""

    expected = PastelColorStrategy(seed=7)()
    queue = CategorizationQueue.load(store, color_strategy=PastelColorStrategy(seed=7))
    assert queue.submit(cat, False)["success"]

    with store.session() as s:
        assert s.execute(select(Category.color).where(Category.id == cat)).scalar_one() == expected


def test_existing_color_is_kept(store: Store, tmp_path: Path):
    _import(store, tmp_path, [("Cleared", "01/15/2024", "COFFEE", "3.50", "")])
    cat = seed_category(store, "Coffee", color="#123456")
    tx = api.get_uncategorized_transactions(store)[0]

    assert categorize_transaction(store, tx.id, cat, False)["success"]
    with store.session() as s:
        assert s.get(Category, cat).color == "#123456"


def test_unknown_transaction_reports_not_found(store: Store):
    cat = seed_category(store, "Misc")
    result = api.submit_categorization(store, 42, cat, False)
    assert result == {"success": False, "error": "Transaction not found: 42"}


def test_submit_on_empty_queue(store: Store):
    queue = CategorizationQueue.load(store)
    assert queue.peek() is None
    assert queue.submit(1, False) == {"success": False, "error": "No pending transactions"}
