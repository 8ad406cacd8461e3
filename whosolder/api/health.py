"""
Operational endpoints: liveness, readiness and Prometheus counters.

Readiness only depends on the store; with no store configured the service is
still ready (it degrades, it does not fail).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from whosolder.api.deps import get_store
from whosolder.core.errors import StoreError
from whosolder.core.metrics import METRICS
from whosolder.features.storage.base import GameStore

logger = logging.getLogger("whosolder")

router = APIRouter()

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4"


@router.get("/healthz", tags=["health"])
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@router.get("/readyz", tags=["health"])
def readyz(store: Optional[GameStore] = Depends(get_store)):
    """Readiness check: store connectivity + game tables."""
    if store is None:
        return {"status": "ok", "store": "none"}

    try:
        store.ping()
    except StoreError as e:
        logger.error(f"[readyz] readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "store unreachable"})
    return {"status": "ok", "store": type(store).__name__}


@router.get("/metrics", tags=["metrics"])
def metrics_endpoint():
    return Response(content=METRICS.export_prometheus(), media_type=PROMETHEUS_CONTENT_TYPE)
