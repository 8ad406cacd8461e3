from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, field_validator

from whosolder.api.deps import get_challenge_service, get_clock, get_settings, get_store
from whosolder.core.config import Settings
from whosolder.features.challenges.service import ChallengeService
from whosolder.features.identity.service import client_metadata_from_request
from whosolder.features.scoring.service import ScoreSubmission, submit_score
from whosolder.features.storage.base import GameStore

router = APIRouter()


class ScoreRequest(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    answers: List[str] = Field(..., min_length=1)
    sig: str = Field(..., min_length=8)
    clientId: Optional[str] = Field(None, max_length=128)

    @field_validator("date")
    @classmethod
    def _real_calendar_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value


@router.post("/api/score")
def post_score(
    body: ScoreRequest,
    request: Request,
    cfg: Settings = Depends(get_settings),
    store: Optional[GameStore] = Depends(get_store),
    challenges: ChallengeService = Depends(get_challenge_service),
    now: datetime = Depends(get_clock),
):
    """Grade a submission against the regenerated challenge for its date."""
    outcome = submit_score(
        ScoreSubmission(
            date=body.date,
            answers=body.answers,
            sig=body.sig,
            client_id=body.clientId or None,
        ),
        challenges=challenges,
        store=store,
        metadata=client_metadata_from_request(request),
        secret=cfg.GAME_SECRET,
        rate_limit=cfg.RATE_LIMIT_MAX,
        window_seconds=cfg.RATE_LIMIT_WINDOW_SECONDS,
        now=now,
    )
    return outcome.to_response()
