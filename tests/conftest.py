"""Shared pytest fixtures for business directory tests."""

import pytest
from datasette.app import Datasette

from datasette_business_directory.errors import StoreReadFailed, StoreWriteFailed
from datasette_business_directory.migrations import run_migrations
from datasette_business_directory.store import SQLiteRecordStore


class FlakyStore:
    """Wraps a real store, recording writes and failing on demand.

    ``fail_insert``, ``fail_delete`` and ``fail_query`` are sets of table
    names whose operations should raise.
    """

    def __init__(self, inner):
        self.inner = inner
        self.fail_insert: set[str] = set()
        self.fail_delete: set[str] = set()
        self.fail_query: set[str] = set()
        self.writes: list[tuple[str, str]] = []

    async def query(self, table, filters=(), order=()):
        if table in self.fail_query:
            raise StoreReadFailed("connection reset")
        return await self.inner.query(table, filters, order)

    async def insert(self, table, row):
        self.writes.append(("insert", table))
        if table in self.fail_insert:
            raise StoreWriteFailed("insert rejected by store")
        return await self.inner.insert(table, row)

    async def delete(self, table, filters):
        self.writes.append(("delete", table))
        if table in self.fail_delete:
            raise StoreWriteFailed("delete rejected by store")
        return await self.inner.delete(table, filters)


@pytest.fixture
def db_path(tmp_path):
    """Create a temporary database with full schema via migrations.

    This is the canonical way to get a test database - uses the same
    migration system as production.
    """
    db_file = tmp_path / "test_directory.db"
    run_migrations(db_file)
    return db_file


@pytest.fixture
def store(db_path):
    return SQLiteRecordStore(db_path)


@pytest.fixture
def flaky_store(store):
    return FlakyStore(store)


@pytest.fixture
def datasette(db_path):
    """Create a Datasette instance with the plugin configured."""
    return Datasette(
        [str(db_path)],
        config={
            "plugins": {
                "datasette-business-directory": {
                    "store": {"backend": "sqlite", "db_path": str(db_path)},
                    "admin_actor_ids": ["root"],
                }
            },
        },
    )


@pytest.fixture
def admin_cookie(datasette):
    """Signed actor cookie for a directory admin."""
    actor = {"id": "admin:kim", "principal_type": "admin", "display": "Kim"}
    return datasette.sign({"a": actor}, "actor")


@pytest.fixture
def visitor_cookie(datasette):
    """Signed actor cookie for a logged-in non-admin."""
    actor = {"id": "user:sam", "principal_type": "visitor"}
    return datasette.sign({"a": actor}, "actor")
