"""
Global pytest fixtures for the Shortener Platform test suite.

Responsibilities:
    - Provide fresh memory and file storage backends per test
    - Provide a URLManager wired to the memory backend
    - Provide a TestClient over a fresh app (lifespan included, so the
      backend is bootstrapped and closed like in production)
    - Provide a DBStorage over an in-process fake connection pool, so the
      PostgreSQL backend's SQL flow runs without a server

Why an app factory?
    `create_app(settings, storage)` gives each test its own settings and
    backend, eliminating cross-test state.
"""

import contextlib

import psycopg.errors
import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortener_platform.config import Settings
from shortener_platform.manager.url_manager import URLManager
from shortener_platform.storage.db_storage import DBStorage
from shortener_platform.storage.file_storage import FileStorage
from shortener_platform.storage.memory_storage import MemoryStorage

BASE_URL = "http://localhost:8080"


# ---------------------------------------------------------------------
# Fake PostgreSQL pool
# ---------------------------------------------------------------------


class FakeTable:
    """Committed contents of the `urls` table. The serial is never rolled back."""

    def __init__(self):
        self.rows = []
        self.next_id = 1
        self.created = False


class FakeCursor:
    """Understands exactly the statements DBStorage issues."""

    def __init__(self, con, dict_rows=False):
        self.con = con
        self.dict_rows = dict_rows
        self.result = []

    def _visible(self):
        return self.con.table.rows + self.con.pending

    def execute(self, query, params=None):
        if self.con.fail_with is not None:
            raise self.con.fail_with
        sql = " ".join(query.split())
        self.con.executed.append(sql)

        if sql.startswith("CREATE TABLE"):
            self.con.pending_create = True
            self.result = []
        elif sql == "SELECT 1":
            self.result = [(1,)]
        elif sql.startswith("SELECT COUNT(*)"):
            hits = sum(1 for r in self._visible() if r["original_url"] == params[0])
            self.result = [(0 if self.con.blind_count else hits,)]
        elif sql.startswith("INSERT INTO urls"):
            original_url, short_url, user_id = params
            for r in self._visible():
                if r["original_url"] == original_url or r["short_url"] == short_url:
                    raise psycopg.errors.UniqueViolation("duplicate key value violates unique constraint")
            row = {
                "id": self.con.table.next_id,
                "original_url": original_url,
                "short_url": short_url,
                "user_id": user_id,
            }
            self.con.table.next_id += 1
            self.con.pending.append(row)
            self.result = [(row["id"],)]
        elif sql.endswith("WHERE short_url = %s"):
            self.result = [dict(r) for r in self._visible() if r["short_url"] == params[0]]
        elif sql.endswith("WHERE user_id = %s"):
            self.result = [dict(r) for r in self._visible() if r["user_id"] == params[0]]
        else:
            raise AssertionError(f"unexpected SQL: {sql}")

    def fetchone(self):
        return self.result.pop(0) if self.result else None

    def fetchall(self):
        rows, self.result = self.result, []
        return rows

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeConnection:
    def __init__(self, table):
        self.table = table
        self.pending = []
        self.pending_create = False
        self.commits = 0
        self.rollbacks = 0
        self.executed = []
        self.blind_count = False
        self.fail_with = None

    def cursor(self, row_factory=None):
        return FakeCursor(self, dict_rows=row_factory is not None)

    def commit(self):
        self.table.rows.extend(self.pending)
        if self.pending_create:
            self.table.created = True
        self.pending = []
        self.pending_create = False
        self.commits += 1

    def rollback(self):
        self.pending = []
        self.pending_create = False
        self.rollbacks += 1

    @contextlib.contextmanager
    def transaction(self):
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()


class FakePool:
    """Stands in for psycopg_pool.ConnectionPool with a single shared connection."""

    def __init__(self):
        self.table = FakeTable()
        self.con = FakeConnection(self.table)
        self.unavailable = None
        self.opened = False
        self.closed = False
        self.timeouts = []

    @contextlib.contextmanager
    def connection(self, timeout=None):
        self.timeouts.append(timeout)
        if self.unavailable is not None:
            raise self.unavailable
        try:
            yield self.con
        except BaseException:
            self.con.rollback()
            raise
        self.con.commit()

    def open(self, wait=False, timeout=30.0):
        self.opened = True

    def close(self):
        self.closed = True


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


@pytest.fixture
def db_storage(fake_pool: FakePool) -> DBStorage:
    storage = DBStorage(dsn="postgresql://fake", timeout=0.5, pool=fake_pool)
    storage.bootstrap()
    return storage


@pytest.fixture
def settings() -> Settings:
    """Settings with no storage configured (memory backend) and a test secret."""
    return Settings(base_url=BASE_URL, secret_key="test-secret")


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def file_storage(tmp_path) -> FileStorage:
    storage = FileStorage(str(tmp_path / "urls.json"))
    storage.bootstrap()
    return storage


@pytest.fixture
def manager(memory_storage: MemoryStorage) -> URLManager:
    return URLManager(storage=memory_storage, base_url=BASE_URL)


@pytest.fixture
def client(settings: Settings, memory_storage: MemoryStorage):
    """
    TestClient over a fresh app backed by `memory_storage`.

    Used as a context manager so the lifespan (bootstrap/close) runs.
    """
    app = create_app(settings=settings, storage=memory_storage)
    with TestClient(app) as test_client:
        yield test_client
