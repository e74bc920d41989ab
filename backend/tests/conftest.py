import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
import httpx
from fastapi.testclient import TestClient

from api.deps import get_engine, get_provider, get_schema_cache
from core.db_connector import create_engine_from_url
from core.schema_cache import SchemaCache
from integrations.llm_provider import GenerationProvider
from main import app
from models.generation import Completion
from models.table import ColumnMetadata, SchemaSnapshot, TableMetadata


class StubProvider(GenerationProvider):
    """Provider that answers every call with a canned reply and records the calls."""

    name = "stub"
    requires_api_key = False

    def __init__(self, reply: str = "SELECT 1", tokens: int = 42):
        super().__init__(client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(500))))
        self.reply = reply
        self.tokens = tokens
        self.calls = []

    def _build_payload(self, system, user, max_tokens):
        return {}

    def _extract(self, body):
        return Completion(text="")

    def complete(self, system, user, max_tokens=None):
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens})
        return Completion(text=self.reply, tokens=self.tokens)


def make_cache(*tables: TableMetadata) -> SchemaCache:
    cache = SchemaCache()
    cache._snapshot = SchemaSnapshot(tables=tuple(tables))
    return cache


@pytest.fixture
def customers_cache():
    return make_cache(TableMetadata(
        table_name="customers",
        columns=(
            ColumnMetadata(name="id", data_type="integer", is_nullable=False, is_primary_key=True),
            ColumnMetadata(name="email", data_type="text"),
        ),
    ))


@pytest.fixture
def stub_provider():
    provider = StubProvider()
    yield provider
    provider.close()


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        cur = conn.cursor()
        cur.execute(
            "CREATE TABLE customers ("
            "id INTEGER NOT NULL PRIMARY KEY, "
            "email TEXT NOT NULL UNIQUE, "
            "created_at TIMESTAMP);"
        )
        cur.execute(
            "CREATE TABLE orders ("
            "id INTEGER NOT NULL PRIMARY KEY, "
            "customer_id INTEGER NOT NULL REFERENCES customers(id), "
            "total REAL, "
            "note BLOB);"
        )
        cur.executemany(
            "INSERT INTO customers (email, created_at) VALUES (?, ?);",
            [
                ("ada@example.com", "2024-01-02 03:04:05"),
                ("grace@example.com", "2024-02-03 04:05:06"),
                ("linus@example.com", None),
            ],
        )
        cur.executemany(
            "INSERT INTO orders (customer_id, total, note) VALUES (?, ?, ?);",
            [(1, 10.5, b"gift"), (1, 20.0, None), (2, 7.25, b"rush")],
        )
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def engine(temp_sqlite_db):
    eng = create_engine_from_url(f"sqlite:///{temp_sqlite_db}")
    yield eng
    eng.dispose()


@pytest.fixture
def loaded_cache(engine):
    cache = SchemaCache()
    cache.load(engine)
    return cache


@pytest.fixture
def client(engine, loaded_cache, stub_provider):
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_schema_cache] = lambda: loaded_cache
    app.dependency_overrides[get_provider] = lambda: stub_provider
    # Not entered as a context manager: the lifespan would build its own resources.
    yield TestClient(app)
    app.dependency_overrides.clear()
