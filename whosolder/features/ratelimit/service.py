"""
Fixed-window limiter for score submissions.

A client gets ``limit`` requests per window of ``window_seconds``; the window
index is floor(epoch_seconds / window_seconds). Counting happens in the store
with a single atomic increment, so concurrent requests cannot under-count.
"""

import math
import time
from typing import Optional

from whosolder.features.storage.base import GameStore
from whosolder.models.streak import RateLimitResult

DEFAULT_LIMIT = 20
DEFAULT_WINDOW_SECONDS = 60


def window_index(now: float, window_seconds: int) -> int:
    return math.floor(now / window_seconds)


def check_rate_limit(
    store: Optional[GameStore],
    client_id: str,
    limit: int = DEFAULT_LIMIT,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    now: Optional[float] = None,
) -> RateLimitResult:
    """
    Count one request for ``client_id`` and decide whether it may proceed.

    Without a store every request is allowed.
    """
    if store is None:
        return RateLimitResult(allowed=True)

    current = time.time() if now is None else now
    window = window_index(current, window_seconds)
    count = store.increment_rate_window(client_id, window)
    if count <= limit:
        return RateLimitResult(allowed=True)

    retry_after = (window + 1) * window_seconds - math.floor(current)
    return RateLimitResult(allowed=False, retry_after=max(1, retry_after))
