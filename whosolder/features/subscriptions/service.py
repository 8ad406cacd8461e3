"""
Newsletter email capture.

Only a keyed hash of the normalized address and a short display hint are
stored; the raw address never leaves this module.
"""

import hashlib
import hmac
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from whosolder.core.errors import ValidationError
from whosolder.core.logging import log_event
from whosolder.features.storage.base import GameStore

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_EMAIL_LENGTH = 254


@dataclass(frozen=True)
class SubscriptionResult:
    stored: bool
    hint: Optional[str] = None
    created: bool = False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return len(email) <= MAX_EMAIL_LENGTH and bool(EMAIL_PATTERN.match(email))


def hash_email(secret: str, email: str) -> str:
    return hmac.new(secret.encode("utf-8"), normalize_email(email).encode("utf-8"), hashlib.sha256).hexdigest()


def email_hint(email: str) -> str:
    """"jane@example.com" -> "ja***@example.com"; anything unparseable -> "redacted"."""
    local, sep, domain = normalize_email(email).partition("@")
    if not sep or not local or not domain:
        return "redacted"
    return f"{local[:2]}***@{domain}"


def subscribe(
    store: Optional[GameStore],
    secret: str,
    email: str,
    now: Optional[datetime] = None,
) -> SubscriptionResult:
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        raise ValidationError("Invalid email address")
    if store is None:
        return SubscriptionResult(stored=False)

    hint = email_hint(normalized)
    created = store.add_subscription(
        hash_email(secret, normalized),
        hint,
        now or datetime.now(timezone.utc),
    )
    log_event("info", "subscription.stored", event_type="subscription", extra={"new_subscriber": created})
    return SubscriptionResult(stored=True, hint=hint, created=created)
