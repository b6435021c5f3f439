"""Pytest configuration for test isolation.

Tests import the workspace packages straight from the source tree, so
``packages/`` and ``libs/db/src`` are put on ``sys.path`` ahead of anything
installed. Each test then gets its own file-backed SQLite store and a clean
environment (no inherited ``DATABASE_URL`` or ``SPEND_TRACKER_*`` overrides).
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_SRC_DIRS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _SRC_DIRS if str(p) not in sys.path]

from tests.helpers.db import bootstrap_sqlite_store  # noqa: E402
from tracker_db.client import Store  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop settings a developer's shell or ``.env`` may have exported."""

    for name in (
        "DATABASE_URL",
        "SPEND_TRACKER_LOG_LEVEL",
        "SPEND_TRACKER_IMPORT_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store(tmp_path: Path) -> Iterator[Store]:
    s = bootstrap_sqlite_store(tmp_path / "spend.db")
    try:
        yield s
    finally:
        s.dispose()
