"""SQLAlchemy engine/session handle for the spend tracker database.

Usage
-----
from tracker_db.client import Store

store = Store(database_url="sqlite+pysqlite:///spend.db")
store.initialize()

with store.transaction() as s:   # begin/commit/rollback, serialized writers
    s.add(...)

with store.session() as s:       # read-only work, no write lock
    s.execute(...)

Each ``Store`` owns its engine; there is no module-level singleton. Callers pass
the handle explicitly to every pipeline operation.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, or_, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.ledger import DEFAULT_CATEGORY_COLOR, Base, Category


def _database_url(override: str | None = None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot initialize database client")
    return url


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _):  # pragma: no cover - tiny bridge
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


class Store:
    """Explicitly owned database handle.

    Writers go through :meth:`transaction`, which holds a process-wide
    re-entrant lock for the whole begin/commit/rollback span. That makes every
    mutation equivalent to an exclusive lock on the rows it touches. Readers
    use :meth:`session` and rely on the database's own isolation.
    """

    def __init__(self, database_url: str | None = None, *, echo: bool = False) -> None:
        self.url = _database_url(database_url)
        self.engine: Engine = create_engine(self.url, echo=echo, pool_pre_ping=True)
        if self.engine.dialect.name == "sqlite":
            _enable_sqlite_foreign_keys(self.engine)
        self._session_maker: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, class_=Session
        )
        self._write_lock = threading.RLock()

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"Store(url={self.engine.url.render_as_string(hide_password=True)!r})"

    def initialize(self) -> None:
        """Create missing tables and backfill category colors.

        Production databases are migrated with Alembic (``libs/db/alembic``);
        this is the lightweight path used by local databases and tests.
        """

        Base.metadata.create_all(bind=self.engine)
        with self.transaction() as session:
            session.execute(
                update(Category)
                .where(or_(Category.color.is_(None), Category.color == ""))
                .values(color=DEFAULT_CATEGORY_COLOR)
            )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide a session for reads; it is closed but never committed."""

        session = self._session_maker()
        try:
            yield session
        finally:
            session.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Provide a serialized transactional scope around a unit of work."""

        with self._write_lock:
            session = self._session_maker()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Store"]
