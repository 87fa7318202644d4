from __future__ import annotations

import pytest

from quizfunnel.store.db import Database
from quizfunnel.store.migrations import run_migrations


@pytest.fixture
def db() -> Database:
    database = Database(":memory:")
    database.connect()
    yield database
    database.close()


def _tables(db: Database) -> set[str]:
    rows = db.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {r["name"] for r in rows}


class TestRunMigrations:
    def test_creates_tables(self, db: Database) -> None:
        run_migrations(db)
        assert {"quizzes", "leads", "quiz_analytics", "drop_offs"} <= _tables(db)

    def test_idempotent(self, db: Database) -> None:
        run_migrations(db)
        run_migrations(db)
        assert "leads" in _tables(db)
