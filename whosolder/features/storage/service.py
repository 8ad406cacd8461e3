"""
Store selection.

STORAGE_BACKEND:
- auto: SQL store when a database URL is configured, otherwise no store
- memory: process-local store
- none: no store (rate limiting fails open, streaks are omitted)
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from whosolder.core.config import Settings, settings
from whosolder.core.database import create_all_tables, init_engine
from whosolder.core.logging import log_event
from whosolder.features.storage.base import GameStore
from whosolder.features.storage.memory import InMemoryGameStore
from whosolder.features.storage.sql import SqlGameStore

_UNRESOLVED = object()
_store_instance = _UNRESOLVED


def build_store(settings_obj: Optional[Settings] = None) -> Optional[GameStore]:
    cfg = settings_obj or settings
    backend = (cfg.STORAGE_BACKEND or "auto").strip().lower()

    if backend == "none":
        return None
    if backend == "memory":
        return InMemoryGameStore()

    url = cfg.TEST_DATABASE_URL or cfg.DATABASE_URL
    if not url:
        log_event("info", "store.unavailable", event_type="storage", extra={"reason": "not_configured"})
        return None

    try:
        engine = init_engine(url)
        create_all_tables(engine)
        return SqlGameStore(engine)
    except (SQLAlchemyError, ValueError) as e:
        log_event(
            "warning",
            "store.unavailable",
            event_type="storage",
            error_code="store_unavailable",
            extra={"reason": type(e).__name__},
        )
        return None


def get_store() -> Optional[GameStore]:
    """
    Get the process-wide store, resolving it on first use.

    None is a valid, cached answer: it means "no persistence".
    """
    global _store_instance
    if _store_instance is _UNRESOLVED:
        _store_instance = build_store()
    return _store_instance


def reset_store() -> None:
    """FOR TESTING ONLY - forces re-selection on next get_store() call."""
    global _store_instance
    _store_instance = _UNRESOLVED
