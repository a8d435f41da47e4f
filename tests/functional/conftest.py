from __future__ import annotations

"""Functional test bootstrap.

Points the app at a file-backed SQLite database shared across the process and
applies the packaged migrations once at session start. Every test starts from
empty catalog tables.
"""

import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple

import pytest
from sqlalchemy import text as sql_text

# Ensure the app points to the shared SQLite file before any app imports
_DB_DIR = Path(tempfile.mkdtemp(prefix="tourism_admin_tests_"))
_DB_FILE = _DB_DIR / "functional_tests.db"

os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"
os.environ.pop("MIGRATIONS_JOURNAL", None)

Row = Tuple[str, Optional[int]]


@pytest.fixture(scope="session")
def engine():
    from tourism_admin.db.base import dispose_engines, get_engine
    from tourism_admin.db.migrations_runner import apply_migrations

    eng = get_engine(os.environ["TEST_DATABASE_URL"])
    apply_migrations(eng, journal_path=_DB_DIR / "_journal.json")
    yield eng
    dispose_engines()


@pytest.fixture(autouse=True)
def clean_tables(engine) -> None:
    from tourism_admin.models.collections import all_descriptors

    with engine.begin() as conn:
        for d in all_descriptors():
            conn.execute(sql_text(f"DELETE FROM {d.table}"))
    yield


@pytest.fixture
def order_engine(engine):
    from tourism_admin.logic.order_engine import OrderEngine

    return OrderEngine(engine, batch_max_moves=50)


def _created_at(index: int) -> str:
    return f"2024-01-01T00:{index // 60:02d}:{index % 60:02d}+00:00"


@pytest.fixture
def seed(engine) -> Callable[..., None]:
    """Insert rows as ``(id, position)`` pairs; creation time follows list order."""

    def _seed(collection: str, rows: Iterable[Row], *, start: int = 0) -> None:
        with engine.begin() as conn:
            for i, (item_id, position) in enumerate(rows):
                conn.execute(
                    sql_text(
                        f"INSERT INTO {collection} (id, name, is_active, order_position, created_at, updated_at) "
                        "VALUES (:id, :name, :active, :pos, :created, :created)"
                    ),
                    {
                        "id": item_id,
                        "name": f"Item {item_id}",
                        "active": True,
                        "pos": position,
                        "created": _created_at(start + i),
                    },
                )

    return _seed


@pytest.fixture
def positions(engine) -> Callable[[str], Dict[str, Optional[int]]]:
    def _positions(collection: str) -> Dict[str, Optional[int]]:
        with engine.connect() as conn:
            rows = conn.execute(sql_text(f"SELECT id, order_position FROM {collection}")).fetchall()
        return {str(r[0]): (int(r[1]) if r[1] is not None else None) for r in rows}

    return _positions


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient

    from tourism_admin.config import load_config
    from tourism_admin.main import create_app

    with TestClient(create_app(load_config())) as c:
        yield c
