from typing import Any, Dict, Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from whosolder.core.logging import log_event
from whosolder.core.metrics import client_errors_total

router = APIRouter()


class ClientErrorReport(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    name: str = Field("Error", max_length=200)
    stack: Optional[str] = Field(None, max_length=10000)
    context: Optional[Dict[str, Any]] = None


@router.post("/api/error", status_code=204)
def report_client_error(report: ClientErrorReport):
    """Best-effort browser error sink. Nothing is stored."""
    client_errors_total.inc()
    log_event(
        "warning",
        "client.error",
        event_type="client_error",
        extra={
            "error_name": report.name,
            "error_message": report.message,
            "stack": report.stack,
            "context": report.context,
        },
    )
    return Response(status_code=204)
