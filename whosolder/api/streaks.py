from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from whosolder.api.deps import get_settings, get_store
from whosolder.core.config import Settings
from whosolder.features.identity.service import client_metadata_from_request, derive_client_id
from whosolder.features.storage.base import GameStore
from whosolder.features.streaks.service import get_streak

router = APIRouter()


@router.get("/api/streak")
def get_current_streak(
    request: Request,
    clientId: Optional[str] = Query(None, max_length=128),
    cfg: Settings = Depends(get_settings),
    store: Optional[GameStore] = Depends(get_store),
):
    """Return {streak, best, lastDate}; zeros when unknown. Without clientId the network fingerprint is used."""
    client_id = derive_client_id(cfg.GAME_SECRET, client_metadata_from_request(request), clientId or None)
    return get_streak(store, client_id).to_response()
