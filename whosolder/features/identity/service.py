"""
Client identity for streaks and rate limiting.

A client-supplied id wins. Otherwise the id is a keyed hash of network
metadata so raw IP addresses are never stored.
"""

import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional

from starlette.requests import Request

UNKNOWN_IP = "0.0.0.0"
UNKNOWN_USER_AGENT = "unknown"


@dataclass(frozen=True)
class ClientMetadata:
    ip: str = UNKNOWN_IP
    user_agent: str = UNKNOWN_USER_AGENT


def client_metadata_from_request(request: Request) -> ClientMetadata:
    """Prefer the CDN client IP header, then the first X-Forwarded-For hop, then the socket peer."""
    headers = request.headers
    ip = (headers.get("cf-connecting-ip") or "").strip()
    if not ip:
        forwarded = headers.get("x-forwarded-for") or ""
        ip = forwarded.split(",")[0].strip()
    if not ip and request.client is not None:
        ip = request.client.host or ""
    user_agent = (headers.get("user-agent") or "").strip()
    return ClientMetadata(ip=ip or UNKNOWN_IP, user_agent=user_agent or UNKNOWN_USER_AGENT)


def derive_client_id(secret: str, metadata: ClientMetadata, provided_id: Optional[str] = None) -> str:
    if provided_id:
        return provided_id
    message = f"{metadata.ip}|{metadata.user_agent}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
