"""Alembic migrations produce the same schema as the ORM models."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text
from tracker_db import Store, metadata

_ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "libs" / "db" / "alembic"


def _config(url: str) -> Config:
    # No ini file: keeps alembic from reconfiguring logging mid-test
    cfg = Config()
    cfg.set_main_option("script_location", str(_ALEMBIC_DIR))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


@pytest.fixture
def migrated_url(tmp_path: Path) -> str:
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    command.upgrade(_config(url), "head")
    return url


def test_upgrade_creates_orm_tables_and_columns(migrated_url: str):
    insp = inspect(create_engine(migrated_url))
    tables = set(insp.get_table_names()) - {"alembic_version"}
    assert tables == set(metadata.tables)
    for name, table in metadata.tables.items():
        got = {c["name"] for c in insp.get_columns(name)}
        assert got == {c.name for c in table.columns}, name


def test_upgrade_creates_lookup_indexes(migrated_url: str):
    insp = inspect(create_engine(migrated_url))
    names = {ix["name"] for ix in insp.get_indexes("transactions")}
    expected = {ix.name for ix in metadata.tables["transactions"].indexes}
    assert expected <= names


def test_color_server_default_applies(migrated_url: str):
    engine = create_engine(migrated_url)
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO categories (name) VALUES ('Raw')"))
        color = conn.execute(text("SELECT color FROM categories")).scalar_one()
    assert color == "#e0e0e0"


def test_store_works_on_migrated_database(migrated_url: str):
    store = Store(migrated_url)
    store.initialize()
    with store.session() as s:
        assert s.execute(text("SELECT count(*) FROM transactions")).scalar_one() == 0
    store.dispose()


def test_downgrade_to_base(migrated_url: str):
    command.downgrade(_config(migrated_url), "base")
    insp = inspect(create_engine(migrated_url))
    assert set(insp.get_table_names()) <= {"alembic_version"}
