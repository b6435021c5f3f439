"""Import orchestration: statement file → stored transactions.

Per call the importer moves through ``Idle → Reading → (Checking → Skip |
Insert)* → Recorded → Done``:

- Reading: the whole file is read, the layout detected and every row parsed
  before the first write. An unreadable file or unknown layout fails here
  with nothing stored.
- Checking/Insert: each candidate runs in its own short store transaction
  (duplicate check, vendor resolution, default category, insert). Rows
  committed before a later failure stay committed; the failure propagates.
- Recorded: one ``import_history`` row with the accepted count is appended,
  even when every row was a duplicate.
- Done: the summary carries the system-wide list of uncategorized
  transactions for the categorization queue.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, date, datetime
from os import PathLike

from tracker_db.client import Store
from tracker_db.models.ledger import ImportRecord, Transaction

from .duplicates import fingerprint, is_duplicate
from .logging_setup import get_logger
from .models import ImportSummary, TransactionCandidate
from .parsing import ParsedStatement, parse_file
from .transactions import list_uncategorized
from .vendors import default_category_for, normalize_vendor, resolve_vendor

logger = get_logger("spend_tracker.importer")

_WORKERS_ENV = "SPEND_TRACKER_IMPORT_WORKERS"


def _import_candidate(
    store: Store, candidate: TransactionCandidate, *, source_file: str
) -> tuple[bool, int, int | None]:
    """Store one candidate unless it is a duplicate.

    Returns ``(inserted, vendor_id, category_id)``; ``vendor_id`` is ``-1``
    for duplicates since vendor state is not touched.
    """

    vendor_key = normalize_vendor(candidate.vendor_raw)
    with store.transaction() as session:
        if is_duplicate(session, candidate, vendor_key):
            logger.debug("duplicate skipped: %s", fingerprint(candidate, vendor_key))
            return False, -1, None

        vendor_id = resolve_vendor(session, vendor_key)
        category_id = default_category_for(session, vendor_id)
        session.add(
            Transaction(
                date=date.fromisoformat(candidate.date),
                vendor_id=vendor_id,
                amount=candidate.amount,
                description=candidate.description,
                category_id=category_id,
                recurring=False,
                source_file=source_file,
            )
        )
    return True, vendor_id, category_id


def store_statement(store: Store, parsed: ParsedStatement) -> ImportSummary:
    """Insert an already parsed statement and record its provenance."""

    imported = 0
    duplicates = 0
    # dict keeps first-seen order without repeats
    uncategorized: dict[int, None] = {}

    for candidate in parsed.candidates:
        inserted, vendor_id, category_id = _import_candidate(
            store, candidate, source_file=parsed.file_name
        )
        if not inserted:
            duplicates += 1
            continue
        imported += 1
        if category_id is None:
            uncategorized.setdefault(vendor_id, None)

    with store.transaction() as session:
        session.add(
            ImportRecord(
                file_name=parsed.file_name,
                import_date=datetime.now(UTC),
                transaction_count=imported,
            )
        )

    with store.session() as session:
        pending = tuple(list_uncategorized(session))

    logger.info(
        "imported %s (%s): %d new, %d duplicate(s), %d pending categorization",
        parsed.file_name,
        parsed.layout.name,
        imported,
        duplicates,
        len(pending),
    )
    return ImportSummary(
        file_name=parsed.file_name,
        imported_count=imported,
        duplicate_count=duplicates,
        uncategorized_vendor_ids=tuple(uncategorized),
        pending=pending,
    )


def import_file(store: Store, path: str | PathLike[str]) -> ImportSummary:
    """Import one statement file.

    Raises
    ------
    FileNotFoundError, PermissionError
        The file cannot be read; nothing is stored.
    spend_tracker.errors.FormatError
        The layout is not recognized; nothing is stored.
    sqlalchemy.exc.SQLAlchemyError
        A row failed to store; earlier rows remain committed.
    """

    parsed = parse_file(path)
    return store_statement(store, parsed)


def _resolve_max_workers(n_files: int, max_workers: int | None) -> int:
    """Resolve the parse worker count.

    Honors an explicit ``max_workers``, then ``SPEND_TRACKER_IMPORT_WORKERS``,
    and caps to the number of files (minimum 1).
    """

    if max_workers is None:
        env_workers = os.getenv(_WORKERS_ENV)
        try:
            max_workers = int(env_workers) if env_workers else None
        except ValueError:
            logger.warning("ignoring non-integer %s=%r", _WORKERS_ENV, env_workers)
            max_workers = None
    if max_workers is None or max_workers <= 0:
        max_workers = 4
    return max(1, min(max_workers, n_files))


def import_files(
    store: Store,
    paths: Sequence[str | PathLike[str]],
    *,
    max_workers: int | None = None,
) -> list[ImportSummary]:
    """Import several statements.

    Files are read and parsed concurrently on a thread pool; every file is
    parsed and validated before the first insert, and inserts then run one
    file at a time in the given order. Any read or format error aborts the
    whole call before anything is stored.
    """

    if not paths:
        return []

    workers = _resolve_max_workers(len(paths), max_workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="st-parse") as ex:
        parsed = list(ex.map(parse_file, paths))

    return [store_statement(store, p) for p in parsed]


__all__ = ["import_file", "import_files", "store_statement"]
