from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy import func, select
from tracker_db.client import Store
from tracker_db.models.ledger import Vendor

from spend_tracker.vendors import resolve_vendor

WRITERS = 8


def test_concurrent_writers_create_a_vendor_once(store: Store):
    start = threading.Barrier(WRITERS, timeout=10)

    def _resolve() -> int:
        start.wait()
        with store.transaction() as session:
            return resolve_vendor(session, "ACME")

    with ThreadPoolExecutor(max_workers=WRITERS) as pool:
        ids = list(pool.map(lambda _: _resolve(), range(WRITERS)))

    assert len(set(ids)) == 1
    with store.session() as session:
        assert session.execute(select(func.count()).select_from(Vendor)).scalar_one() == 1


def test_transaction_blocks_other_writers_until_commit(store: Store):
    entered = threading.Event()
    release = threading.Event()
    order: list[str] = []

    def _holder() -> None:
        with store.transaction() as session:
            resolve_vendor(session, "FIRST")
            entered.set()
            release.wait(timeout=10)
            order.append("holder")

    def _waiter() -> None:
        entered.wait(timeout=10)
        with store.transaction() as session:
            order.append("waiter")
            resolve_vendor(session, "SECOND")

    holder = threading.Thread(target=_holder)
    waiter = threading.Thread(target=_waiter)
    holder.start()
    waiter.start()
    entered.wait(timeout=10)
    waiter.join(timeout=0.2)
    assert waiter.is_alive()
    release.set()
    holder.join(timeout=10)
    waiter.join(timeout=10)

    assert order == ["holder", "waiter"]
