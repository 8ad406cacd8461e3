from datetime import date, datetime, timezone

import pytest
from sqlalchemy import inspect

from whosolder.core.config import Settings
from whosolder.core.database import init_engine, streaks
from whosolder.core.errors import StoreError
from whosolder.features.storage.memory import InMemoryGameStore
from whosolder.features.storage.service import build_store, get_store, reset_store
from whosolder.features.storage.sql import SqlGameStore
from whosolder.models.streak import StreakRecord

NOW = datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc)


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


def test_tables_created(sqlite_engine):
    names = set(inspect(sqlite_engine).get_table_names())
    assert {"streaks", "rate_limits", "subscriptions"} <= names


def test_sql_modify_streak_round_trip(sql_store):
    def _set(prior):
        assert prior is None
        return StreakRecord(client_id="c", last_played_date=date(2025, 11, 20), current_streak=1, best_streak=1, updated_at=NOW)

    saved = sql_store.modify_streak("c", _set)
    assert saved.current_streak == 1

    loaded = sql_store.get_streak("c")
    assert loaded.last_played_date == date(2025, 11, 20)
    assert loaded.updated_at.tzinfo is not None


def test_sql_rate_window_resets_on_new_window(sql_store):
    assert sql_store.increment_rate_window("c", 100) == 1
    assert sql_store.increment_rate_window("c", 100) == 2
    assert sql_store.increment_rate_window("c", 101) == 1


def test_subscriptions_are_idempotent(sql_store, memory_store):
    for store in (sql_store, memory_store):
        assert store.add_subscription("h" * 64, "ja***@example.com", NOW) is True
        assert store.add_subscription("h" * 64, "ja***@example.com", NOW) is False


def test_ping(sql_store, memory_store):
    assert sql_store.ping()
    assert memory_store.ping()


def test_sql_failures_raise_store_error(sql_store, sqlite_engine):
    streaks.drop(sqlite_engine)
    with pytest.raises(StoreError) as excinfo:
        sql_store.get_streak("c")
    assert excinfo.value.status_code == 503
    with pytest.raises(StoreError):
        sql_store.ping()


def test_init_engine_prefers_explicit_url():
    engine = init_engine("sqlite://")
    assert engine.dialect.name == "sqlite"


def test_memory_store_returns_copies(memory_store):
    memory_store.modify_streak("c", lambda prior: StreakRecord(client_id="c", current_streak=2, best_streak=2))
    copy = memory_store.get_streak("c")
    copy.current_streak = 99
    assert memory_store.get_streak("c").current_streak == 2


def test_build_store_selection():
    assert build_store(_settings(STORAGE_BACKEND="none")) is None
    assert isinstance(build_store(_settings(STORAGE_BACKEND="memory")), InMemoryGameStore)
    assert build_store(_settings(STORAGE_BACKEND="auto", DATABASE_URL=None, TEST_DATABASE_URL=None)) is None


def test_build_store_sqlite_url():
    store = build_store(_settings(STORAGE_BACKEND="auto", DATABASE_URL="sqlite://", TEST_DATABASE_URL=None))
    assert isinstance(store, SqlGameStore)
    assert store.increment_rate_window("c", 1) == 1


def test_unreachable_database_degrades_to_none(tmp_path):
    # A directory cannot be opened as a SQLite file
    url = f"sqlite:///{tmp_path}"
    assert build_store(_settings(STORAGE_BACKEND="auto", DATABASE_URL=url, TEST_DATABASE_URL=None)) is None


def test_get_store_caches_none(monkeypatch):
    import whosolder.features.storage.service as storage_service

    calls = []

    def _fake_build(settings_obj=None):
        calls.append(1)
        return None

    monkeypatch.setattr(storage_service, "build_store", _fake_build)
    reset_store()
    try:
        assert get_store() is None
        assert get_store() is None
        assert len(calls) == 1
    finally:
        reset_store()
