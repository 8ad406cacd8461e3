"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine management with sane pooling defaults
- Table definitions for streaks, rate limits and subscriptions
- Schema creation utilities
"""
from typing import Optional

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from whosolder.core.config import settings

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``; SQLite gets a single shared connection when in-memory."""
    if url.startswith("sqlite"):
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
        pool_pre_ping=True,
        echo=False,  # Set to True for SQL query logging
    )


def init_engine(database_url: Optional[str] = None) -> Engine:
    """
    Build the engine for the configured database.

    Args:
        database_url: Optional override; otherwise TEST_DATABASE_URL, then DATABASE_URL
    """
    url = database_url or settings.TEST_DATABASE_URL or settings.DATABASE_URL

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    return build_engine(url)


def create_all_tables(engine: Engine) -> None:
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    metadata.create_all(bind=engine)



# Per-client consecutive perfect-day streaks. last_date is NULL only for the
# placeholder row written while a first play is being recorded.
streaks = Table(
    'streaks',
    metadata,
    Column('client_id', String(128), primary_key=True),
    Column('last_date', Date, nullable=True),
    Column('streak', Integer, nullable=False, server_default='0'),
    Column('best_streak', Integer, nullable=False, server_default='0'),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
)

# Fixed-window score submission counters
rate_limits = Table(
    'rate_limits',
    metadata,
    Column('client_id', String(128), primary_key=True),
    Column('window_start', Integer, nullable=False),
    Column('request_count', Integer, nullable=False, server_default='0'),
)

# Newsletter capture; only a keyed hash and a display hint are stored
subscriptions = Table(
    'subscriptions',
    metadata,
    Column('email_hash', String(64), primary_key=True),
    Column('email_hint', String(255), nullable=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
)
