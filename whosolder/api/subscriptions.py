from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from whosolder.api.deps import get_clock, get_settings, get_store
from whosolder.core.config import Settings
from whosolder.features.storage.base import GameStore
from whosolder.features.subscriptions.service import MAX_EMAIL_LENGTH, subscribe

router = APIRouter()


class SubscribeRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=MAX_EMAIL_LENGTH)


@router.post("/api/subscribe")
def post_subscribe(
    body: SubscribeRequest,
    cfg: Settings = Depends(get_settings),
    store: Optional[GameStore] = Depends(get_store),
    now=Depends(get_clock),
):
    result = subscribe(store, cfg.subscription_secret, body.email, now=now)
    if not result.stored:
        # Accepted but not persisted: no store configured
        return JSONResponse(status_code=202, content={"ok": True, "stored": False})
    return {"ok": True, "stored": True, "hint": result.hint}
