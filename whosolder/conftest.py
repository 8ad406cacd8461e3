# whosolder/conftest.py
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from whosolder.core.database import build_engine, create_all_tables
from whosolder.core.metrics import METRICS
from whosolder.features.people.dataset import load_people
from whosolder.features.storage.memory import InMemoryGameStore
from whosolder.features.storage.sql import SqlGameStore

# 2025-11-20 has a pinned answer key in the generator tests
FIXED_NOW = datetime(2025, 11, 20, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Counters are process-global; start each test from zero."""
    METRICS.reset()
    yield
    METRICS.reset()


@pytest.fixture
def people():
    return load_people()


@pytest.fixture
def memory_store():
    return InMemoryGameStore()


@pytest.fixture
def sqlite_engine():
    """
    In-memory SQLite with a single shared connection (StaticPool).

    Tables are created fresh per test and vanish with the engine.
    """
    engine = build_engine("sqlite://")
    create_all_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine):
    return SqlGameStore(sqlite_engine)


@pytest.fixture
def make_client(memory_store):
    """Build a TestClient with the store and clock overridden."""
    from whosolder.api.deps import get_clock, get_store
    from whosolder.main import app

    def _make(store=memory_store, now=FIXED_NOW, raise_server_exceptions=True):
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_clock] = lambda: now
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()
