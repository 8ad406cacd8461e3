"""
Storage interface shared by the in-memory and SQL game stores.

Every method that reads and then writes must do so atomically per client:
two concurrent calls for the same client_id observe each other's effects.
Backing-store failures are raised as StoreError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol

from whosolder.models.streak import StreakRecord

StreakMutation = Callable[[Optional[StreakRecord]], StreakRecord]


class GameStore(Protocol):
    def get_streak(self, client_id: str) -> Optional[StreakRecord]:
        ...

    def modify_streak(self, client_id: str, fn: StreakMutation) -> StreakRecord:
        """
        Run ``fn(prior)`` under the client's lock and persist its result.

        ``prior`` is None when the client has never been scored. If ``fn``
        raises, nothing is written and the exception propagates.
        """
        ...

    def increment_rate_window(self, client_id: str, window_start: int) -> int:
        """Count one request in ``window_start`` (resetting on a new window); return the new count."""
        ...

    def add_subscription(self, email_hash: str, email_hint: str, created_at: datetime) -> bool:
        """Insert once per hash; True when a new row was created."""
        ...

    def ping(self) -> bool:
        ...
