"""
HMAC signing of daily answer keys.

The signed message is the compact JSON {"date":"YYYY-MM-DD","olderIds":[...]}
with keys in that order and no whitespace. The signature is the standard
base64 encoding of HMAC-SHA256(secret, message).
"""

import base64
import hashlib
import hmac
import json
from typing import Mapping, Sequence


def answer_payload(date: str, older_ids: Sequence[str]) -> dict:
    return {"date": date, "olderIds": list(older_ids)}


def canonical_payload(payload: Mapping) -> bytes:
    # Rebuilt explicitly so caller key order can never change the bytes
    ordered = {"date": payload["date"], "olderIds": list(payload["olderIds"])}
    return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class ChallengeSigner:
    """Signs and verifies answer keys with one shared secret."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Challenge signing secret must not be empty")
        self._key = secret.encode("utf-8")

    def sign(self, payload: Mapping) -> str:
        digest = hmac.new(self._key, canonical_payload(payload), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def verify(self, payload: Mapping, mac: object) -> bool:
        """Constant-time comparison; anything that is not a string fails closed."""
        if not isinstance(mac, str) or not mac:
            return False
        expected = self.sign(payload)
        return hmac.compare_digest(expected.encode("ascii"), mac.encode("utf-8"))
