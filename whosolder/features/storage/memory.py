from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Tuple

from whosolder.features.storage.base import StreakMutation
from whosolder.models.streak import StreakRecord


class InMemoryGameStore:
    """
    Process-local store for development and tests.

    One lock guards every table; contention is irrelevant at this scale.
    State is lost on restart.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._streaks: Dict[str, StreakRecord] = {}
        self._windows: Dict[str, Tuple[int, int]] = {}
        self._subscriptions: Dict[str, Tuple[str, datetime]] = {}

    def get_streak(self, client_id: str) -> Optional[StreakRecord]:
        with self._lock:
            record = self._streaks.get(client_id)
            return replace(record) if record else None

    def modify_streak(self, client_id: str, fn: StreakMutation) -> StreakRecord:
        with self._lock:
            prior = self._streaks.get(client_id)
            updated = fn(replace(prior) if prior else None)
            self._streaks[client_id] = replace(updated, client_id=client_id)
            return replace(self._streaks[client_id])

    def increment_rate_window(self, client_id: str, window_start: int) -> int:
        with self._lock:
            current = self._windows.get(client_id)
            if current is None or current[0] != window_start:
                count = 1
            else:
                count = current[1] + 1
            self._windows[client_id] = (window_start, count)
            return count

    def add_subscription(self, email_hash: str, email_hint: str, created_at: datetime) -> bool:
        with self._lock:
            if email_hash in self._subscriptions:
                return False
            self._subscriptions[email_hash] = (email_hint, created_at)
            return True

    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def ping(self) -> bool:
        return True
