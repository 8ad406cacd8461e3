from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

from whosolder.core.errors import ReplayError
from whosolder.features.storage.base import GameStore
from whosolder.models.streak import StreakRecord

REPLAY_MESSAGE = "You already played today. Come back tomorrow."


def next_streak(
    prior: Optional[StreakRecord],
    client_id: str,
    play_date: date,
    perfect: bool,
    now: Optional[datetime] = None,
) -> StreakRecord:
    """
    Pure streak transition for one scored play.

    Only perfect days extend a streak. Replaying the same day with a perfect
    score changes nothing; any other gap restarts the count at 1. A non-perfect
    day resets the current streak to 0. The best streak never decreases.
    """
    updated_at = now or datetime.now(timezone.utc)

    if prior is None:
        streak = 1 if perfect else 0
        return StreakRecord(
            client_id=client_id,
            last_played_date=play_date,
            current_streak=streak,
            best_streak=streak,
            updated_at=updated_at,
        )

    if not perfect:
        streak = 0
    else:
        gap = (play_date - prior.last_played_date).days if prior.last_played_date else None
        if gap == 0:
            return replace(prior, last_played_date=play_date, updated_at=updated_at)
        if gap == 1:
            streak = prior.current_streak + 1
        else:
            streak = 1

    best = max(prior.best_streak, prior.current_streak, streak)
    return StreakRecord(
        client_id=client_id,
        last_played_date=play_date,
        current_streak=streak,
        best_streak=best,
        updated_at=updated_at,
    )


def record_play(
    store: Optional[GameStore],
    client_id: str,
    play_date: date,
    perfect: bool,
    *,
    reject_same_day: bool = False,
    now: Optional[datetime] = None,
) -> Optional[StreakRecord]:
    """
    Apply one scored play to the client's persisted streak.

    Args:
        reject_same_day: Raise ReplayError instead of applying a second play
            for a date the client already has on record

    Returns:
        The stored record, or None when there is no store
    """
    if store is None:
        return None

    def _transition(prior: Optional[StreakRecord]) -> StreakRecord:
        if reject_same_day and prior is not None and prior.last_played_date == play_date:
            raise ReplayError(REPLAY_MESSAGE)
        return next_streak(prior, client_id, play_date, perfect, now=now)

    return store.modify_streak(client_id, _transition)


def get_streak(store: Optional[GameStore], client_id: str) -> StreakRecord:
    """Current streak; zeros when the client is unknown or nothing is stored."""
    record = store.get_streak(client_id) if store is not None else None
    return record or StreakRecord(client_id=client_id)


def has_played(store: Optional[GameStore], client_id: str, play_date: date) -> bool:
    if store is None:
        return False
    record = store.get_streak(client_id)
    return record is not None and record.last_played_date == play_date
