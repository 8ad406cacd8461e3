from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class StreakRecord:
    """
    Persisted streak state for one client identity. Day-level, UTC only.

    Invariant: best_streak >= current_streak >= 0.
    """

    client_id: str
    last_played_date: Optional[date] = None
    current_streak: int = 0
    best_streak: int = 0
    updated_at: Optional[datetime] = None

    def to_response(self) -> dict:
        return {
            "streak": self.current_streak,
            "best": self.best_streak,
            "lastDate": self.last_played_date.isoformat() if self.last_played_date else None,
        }


@dataclass
class RateLimitResult:
    allowed: bool
    retry_after: Optional[int] = None
