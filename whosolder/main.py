"""
Who's Older API.

Run with: uvicorn whosolder.main:app
"""

import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from whosolder.api import challenges, client_errors, health, scores, streaks, subscriptions  # noqa: E402
from whosolder.core.config import settings, validate_config  # noqa: E402
from whosolder.core.errors import (  # noqa: E402
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from whosolder.core.logging import configure_logging  # noqa: E402
from whosolder.core.middleware.metrics import MetricsMiddleware  # noqa: E402
from whosolder.core.middleware.request_id import RequestIdMiddleware  # noqa: E402
from whosolder.core.validation import validate_env  # noqa: E402
from whosolder.features.people.dataset import load_people  # noqa: E402

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))

logger = logging.getLogger("whosolder")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.startup_time = time.time()
    # Fail at boot rather than on the first request when the dataset is broken
    people = load_people(settings.PEOPLE_DATA_PATH)
    logger.info(f"[startup] whosolder ready env={settings.ENV} people={len(people)}")
    yield
    logger.info("[shutdown] whosolder stopping")


app = FastAPI(title="Who's Older", lifespan=lifespan)

app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["x-request-id", "Retry-After"],
)

app.include_router(challenges.router, tags=["challenges"])
app.include_router(scores.router, tags=["scores"])
app.include_router(streaks.router, tags=["streaks"])
app.include_router(subscriptions.router, tags=["subscriptions"])
app.include_router(client_errors.router, tags=["telemetry"])
app.include_router(health.router)
