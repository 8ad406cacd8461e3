"""FastAPI dependencies. Tests swap these out through app.dependency_overrides."""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional, Tuple

from fastapi import Depends

from whosolder.core.config import Settings, settings
from whosolder.features.challenges.service import ChallengeService
from whosolder.features.challenges.signing import ChallengeSigner
from whosolder.features.people.dataset import load_people
from whosolder.features.storage import service as storage_service
from whosolder.features.storage.base import GameStore
from whosolder.models.person import Person


def get_settings() -> Settings:
    return settings


def get_store() -> Optional[GameStore]:
    return storage_service.get_store()


def get_people(cfg: Settings = Depends(get_settings)) -> Tuple[Person, ...]:
    return load_people(cfg.PEOPLE_DATA_PATH)


@lru_cache(maxsize=4)
def _challenge_service(people: Tuple[Person, ...], secret: str, count: int) -> ChallengeService:
    return ChallengeService(people, ChallengeSigner(secret), count)


def get_challenge_service(
    people: Tuple[Person, ...] = Depends(get_people),
    cfg: Settings = Depends(get_settings),
) -> ChallengeService:
    return _challenge_service(people, cfg.GAME_SECRET, cfg.MATCHUP_COUNT)


def get_clock() -> datetime:
    return datetime.now(timezone.utc)


def get_today(now: datetime = Depends(get_clock)) -> str:
    """Current UTC calendar day as YYYY-MM-DD."""
    return now.astimezone(timezone.utc).date().isoformat()
