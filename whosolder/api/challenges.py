from fastapi import APIRouter, Depends, Response

from whosolder.api.deps import get_challenge_service, get_settings, get_today
from whosolder.core.config import Settings
from whosolder.core.logging import log_event
from whosolder.core.metrics import challenges_issued_total
from whosolder.features.challenges.service import ChallengeService

router = APIRouter()


@router.get("/api/today")
def get_today_challenge(
    response: Response,
    today: str = Depends(get_today),
    challenges: ChallengeService = Depends(get_challenge_service),
    cfg: Settings = Depends(get_settings),
):
    """Today's matchups and signature. Answers are not included."""
    challenge = challenges.issue(today)
    max_age = cfg.CHALLENGE_CACHE_SECONDS
    response.headers["Cache-Control"] = f"public, max-age={max_age}, s-maxage={max_age}"
    challenges_issued_total.inc()
    log_event(
        "info",
        "challenge.issued",
        play_date=today,
        event_type="challenge",
        extra={"matchups": len(challenge.matchups)},
    )
    return challenge.public_dict()
