"""
whosolder/features/scoring/service.py

Score submission flow:
signature -> answer count -> identity -> rate limit -> replay -> score -> streak.

A failed step raises its typed error and nothing later runs. The rate-limit
counter is the only state touched by a rejected submission.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from whosolder.core.errors import AppError, RateLimitError, ReplayError, StoreError, ValidationError
from whosolder.core.logging import log_event
from whosolder.core.metrics import ratelimit_block_total, score_submissions_total
from whosolder.features.challenges.service import ChallengeService
from whosolder.features.identity.service import ClientMetadata, derive_client_id
from whosolder.features.ratelimit.service import DEFAULT_LIMIT, DEFAULT_WINDOW_SECONDS, check_rate_limit
from whosolder.features.storage.base import GameStore
from whosolder.features.streaks.service import REPLAY_MESSAGE, has_played, record_play
from whosolder.models.matchup import Matchup
from whosolder.models.streak import StreakRecord


@dataclass(frozen=True)
class ScoreSubmission:
    date: str
    answers: Sequence[str]
    sig: str
    client_id: Optional[str] = None


@dataclass(frozen=True)
class MatchupResult:
    correct: bool
    correct_id: str
    matchup: Matchup

    def to_dict(self) -> dict:
        return {
            "correct": self.correct,
            "correctId": self.correct_id,
            "personA": self.matchup.person_a.full_dict(),
            "personB": self.matchup.person_b.full_dict(),
        }


@dataclass
class ScoreOutcome:
    client_id: str
    score: int
    total: int
    results: List[MatchupResult] = field(default_factory=list)
    streak: Optional[StreakRecord] = None

    @property
    def perfect(self) -> bool:
        return self.total > 0 and self.score == self.total

    def to_response(self) -> dict:
        payload = {
            "score": self.score,
            "total": self.total,
            "results": [result.to_dict() for result in self.results],
        }
        if self.streak is not None:
            payload["streak"] = self.streak.to_response()
        return payload


def _reject(outcome: str, error: AppError, submission: ScoreSubmission, client_id: Optional[str] = None) -> AppError:
    score_submissions_total.inc(labels={"outcome": outcome})
    log_event(
        "warning",
        "score.rejected",
        client_id=client_id,
        play_date=submission.date,
        event_type="score",
        error_code=error.code,
        extra={"outcome": outcome},
    )
    return error


def grade(matchups: Sequence[Matchup], answers: Sequence[str]) -> List[MatchupResult]:
    return [
        MatchupResult(correct=answer == matchup.older_id, correct_id=matchup.older_id, matchup=matchup)
        for matchup, answer in zip(matchups, answers)
    ]


def submit_score(
    submission: ScoreSubmission,
    *,
    challenges: ChallengeService,
    store: Optional[GameStore],
    metadata: ClientMetadata,
    secret: str,
    rate_limit: int = DEFAULT_LIMIT,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    now: Optional[datetime] = None,
) -> ScoreOutcome:
    """
    Verify, grade and record one submission.

    Raises:
        AuthenticityError: signature does not match the regenerated challenge
        ValidationError: answer count differs from the matchup count
        RateLimitError: client exceeded the submission window
        ReplayError: client already has a scored play for this date
        StoreError: the store failed before grading
    """
    current = now or datetime.now(timezone.utc)

    try:
        older_ids = challenges.verify_submission(submission.date, submission.sig)
    except AppError as e:
        raise _reject(e.code, e, submission) from e

    if len(submission.answers) != len(older_ids):
        raise _reject(
            "invalid_answers",
            ValidationError(f"Expected {len(older_ids)} answers, got {len(submission.answers)}"),
            submission,
        )

    client_id = derive_client_id(secret, metadata, submission.client_id)

    limited = check_rate_limit(store, client_id, rate_limit, window_seconds, now=current.timestamp())
    if not limited.allowed:
        ratelimit_block_total.inc(labels={"scope": "score"})
        raise _reject(
            "rate_limited",
            RateLimitError("Too many submissions. Slow down.", retry_after=limited.retry_after),
            submission,
            client_id,
        )

    play_date = date.fromisoformat(submission.date)
    if has_played(store, client_id, play_date):
        raise _reject("replay", ReplayError(REPLAY_MESSAGE), submission, client_id)

    matchups = challenges.matchups_for(submission.date)
    results = grade(matchups, submission.answers)
    outcome = ScoreOutcome(
        client_id=client_id,
        score=sum(1 for result in results if result.correct),
        total=len(results),
        results=results,
    )

    try:
        # Same-day check repeated under the store lock for concurrent submissions
        outcome.streak = record_play(
            store,
            client_id,
            play_date,
            outcome.perfect,
            reject_same_day=True,
            now=current,
        )
    except ReplayError as e:
        raise _reject("replay", e, submission, client_id) from e
    except StoreError as e:
        # The score itself is still valid; report it without a streak
        log_event(
            "error",
            "streak.update_failed",
            client_id=client_id,
            play_date=submission.date,
            event_type="score",
            error_code="store_error",
            extra={"reason": type(e.__cause__ or e).__name__},
        )

    score_submissions_total.inc(labels={"outcome": "accepted"})
    log_event(
        "info",
        "score.recorded",
        client_id=client_id,
        play_date=submission.date,
        event_type="score",
        extra={"score": outcome.score, "total": outcome.total, "streak": outcome.streak.current_streak if outcome.streak else None},
    )
    return outcome
