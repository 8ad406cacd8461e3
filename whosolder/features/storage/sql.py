"""
whosolder/features/storage/sql.py

SQLAlchemy Core store for PostgreSQL (production) and SQLite (tests, local).

Atomicity:
- rate windows: one INSERT ... ON CONFLICT DO UPDATE per request
- streaks: placeholder INSERT ... ON CONFLICT DO NOTHING, then
  SELECT ... FOR UPDATE and UPDATE in the same transaction

SQLite has no row locks and ignores FOR UPDATE. There every store call is
serialized by a per-store lock, and writers in other processes wait on the
SQLite database write lock. Run multi-process deployments on PostgreSQL.

Driver and connection failures surface as StoreError.
"""

import threading
from contextlib import contextmanager, nullcontext
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from whosolder.core.database import rate_limits, streaks, subscriptions
from whosolder.core.errors import StoreError
from whosolder.features.storage.base import StreakMutation
from whosolder.models.streak import StreakRecord


_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _record_from_row(row) -> StreakRecord:
    return StreakRecord(
        client_id=row.client_id,
        last_played_date=row.last_date,
        current_streak=row.streak,
        best_streak=row.best_streak,
        updated_at=_as_utc(row.updated_at),
    )


class SqlGameStore:
    """Game store over a shared relational database."""

    def __init__(self, engine: Engine):
        dialect = engine.dialect.name
        if dialect not in _INSERT_BY_DIALECT:
            raise ValueError(f"Unsupported database dialect: {dialect}")
        self.engine = engine
        self._insert = _INSERT_BY_DIALECT[dialect]
        self._sqlite_lock = threading.Lock() if dialect == "sqlite" else None

    @contextmanager
    def _guard(self):
        lock = self._sqlite_lock or nullcontext()
        try:
            with lock:
                yield
        except SQLAlchemyError as exc:
            raise StoreError(f"Game store unavailable: {exc.__class__.__name__}") from exc

    def get_streak(self, client_id: str) -> Optional[StreakRecord]:
        with self._guard(), self.engine.connect() as conn:
            row = conn.execute(
                select(streaks).where(streaks.c.client_id == client_id)
            ).first()
        # last_date is NULL only for a placeholder whose transaction is in flight
        if row is None or row.last_date is None:
            return None
        return _record_from_row(row)

    def modify_streak(self, client_id: str, fn: StreakMutation) -> StreakRecord:
        with self._guard(), self.engine.begin() as conn:
            conn.execute(
                self._insert(streaks)
                .values(client_id=client_id, last_date=None, streak=0, best_streak=0)
                .on_conflict_do_nothing(index_elements=[streaks.c.client_id])
            )
            row = conn.execute(
                select(streaks).where(streaks.c.client_id == client_id).with_for_update()
            ).one()
            prior = None if row.last_date is None else _record_from_row(row)

            # Exceptions from fn roll back the placeholder as well
            updated = fn(prior)
            updated_at = updated.updated_at or datetime.now(timezone.utc)
            conn.execute(
                update(streaks)
                .where(streaks.c.client_id == client_id)
                .values(
                    last_date=updated.last_played_date,
                    streak=updated.current_streak,
                    best_streak=updated.best_streak,
                    updated_at=updated_at,
                )
            )
        return StreakRecord(
            client_id=client_id,
            last_played_date=updated.last_played_date,
            current_streak=updated.current_streak,
            best_streak=updated.best_streak,
            updated_at=updated_at,
        )

    def increment_rate_window(self, client_id: str, window_start: int) -> int:
        stmt = self._insert(rate_limits).values(
            client_id=client_id,
            window_start=window_start,
            request_count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[rate_limits.c.client_id],
            set_={
                "request_count": case(
                    (rate_limits.c.window_start == stmt.excluded.window_start, rate_limits.c.request_count + 1),
                    else_=1,
                ),
                "window_start": stmt.excluded.window_start,
            },
        )
        with self._guard(), self.engine.begin() as conn:
            conn.execute(stmt)
            return conn.execute(
                select(rate_limits.c.request_count).where(rate_limits.c.client_id == client_id)
            ).scalar_one()

    def add_subscription(self, email_hash: str, email_hint: str, created_at: datetime) -> bool:
        stmt = (
            self._insert(subscriptions)
            .values(email_hash=email_hash, email_hint=email_hint, created_at=created_at)
            .on_conflict_do_nothing(index_elements=[subscriptions.c.email_hash])
        )
        with self._guard(), self.engine.begin() as conn:
            result = conn.execute(stmt)
        return result.rowcount == 1

    def ping(self) -> bool:
        """True when every game table answers a trivial query."""
        with self._guard(), self.engine.connect() as conn:
            for table in (streaks, rate_limits, subscriptions):
                conn.execute(select(table).limit(1))
            conn.execute(text("SELECT 1"))
        return True
