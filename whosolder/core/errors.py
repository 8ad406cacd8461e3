"""
Typed game errors and the FastAPI handlers that render them.

Every error response has the same envelope:

    {"error": {"code", "message", "request_id"}, "detail": message}

plus an x-request-id header. Messages of 5xx errors never leave the process.
"""

import logging
from typing import Dict, Optional
from uuid import uuid4

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.requests import Request

from whosolder.core.logging import LOGGER_NAME, get_request_id

logger = logging.getLogger(LOGGER_NAME)

GENERIC_SERVER_MESSAGE = "Unexpected error"


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id

    @property
    def public_message(self) -> str:
        return self.message if self.status_code < 500 else GENERIC_SERVER_MESSAGE


class ValidationError(AppError, ValueError):
    """Malformed submission or request field."""
    code = "validation_error"
    status_code = 400


class AuthenticityError(AppError):
    """Submitted signature does not match the challenge issued for that date."""
    code = "invalid_signature"
    status_code = 403


class ReplayError(AppError):
    """Client already has a scored play for this date."""
    code = "already_played"
    status_code = 409


class RateLimitError(AppError):
    code = "rate_limited"
    status_code = 429

    def __init__(self, message: str, *, retry_after: int, request_id: Optional[str] = None):
        super().__init__(message, request_id=request_id)
        self.retry_after = retry_after


class DatasetError(AppError):
    """The static person dataset is missing or inconsistent."""
    code = "dataset_error"
    status_code = 500


class StoreError(AppError):
    """The game store could not complete a read or write."""
    code = "store_unavailable"
    status_code = 503


def _request_id_for(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or str(uuid4())


def error_response(
    rid: str,
    status_code: int,
    code: str,
    message: str,
    *,
    extra_error_fields: Optional[Dict[str, object]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    error = {"code": code, "message": message, "request_id": rid}
    error.update(extra_error_fields or {})
    response_headers = {"x-request-id": rid}
    response_headers.update(headers or {})
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": message},
        headers=response_headers,
    )


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _request_id_for(request)
    logger.log(
        logging.ERROR if exc.status_code >= 500 else logging.WARNING,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    if isinstance(exc, RateLimitError):
        return error_response(
            rid,
            exc.status_code,
            exc.code,
            exc.public_message,
            extra_error_fields={"retry_after": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )
    return error_response(rid, exc.status_code, exc.code, exc.public_message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Pydantic request errors become 400 validation_error naming the first bad field."""
    rid = _request_id_for(request)
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {field} {first.get('msg', '')}".strip()
    logger.warning("validation.error", extra={"request_id": rid, "error_code": ValidationError.code, "status": 400})
    return error_response(rid, 400, ValidationError.code, message)


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _request_id_for(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    return error_response(rid, exc.status_code, code, exc.detail or "HTTP error", headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _request_id_for(request)
    logger.error("unhandled.exception", exc_info=exc, extra={"request_id": rid, "error_code": "internal_error"})
    return error_response(rid, 500, "internal_error", GENERIC_SERVER_MESSAGE)
