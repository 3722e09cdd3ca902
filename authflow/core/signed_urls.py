"""
Signed, expiring URLs.

A signed URL carries ?expires=<unix seconds>&signature=<hex>, where the
signature is an HMAC-SHA256 over "<path>?expires=<unix seconds>" keyed with
SECRET_KEY. Validity is proven by recomputing the signature; nothing is
stored server-side.
"""

import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from fastapi import Request

from authflow.core.config import settings
from authflow.core.exceptions import InvalidLinkError

logger = logging.getLogger(__name__)


def _signature_for(path: str, expires: int) -> str:
    payload = f"{path}?{urlencode({'expires': expires})}"
    return hmac.new(
        settings.SECRET_KEY.encode('utf-8'),
        payload.encode('utf-8'),
        hashlib.sha256,
    ).hexdigest()


def sign_path(path: str, expires_at: datetime) -> dict:
    """Query parameters that make `path` a signed URL valid until `expires_at`."""
    expires = int(expires_at.timestamp())
    return {"expires": expires, "signature": _signature_for(path, expires)}


def signed_url(path: str, expires_at: datetime, base_url: Optional[str] = None) -> str:
    query = urlencode(sign_path(path, expires_at))
    return f"{(base_url or settings.APP_URL).rstrip('/')}{path}?{query}"


def has_valid_signature(
    path: str,
    expires: Optional[str],
    signature: Optional[str],
    now: Optional[datetime] = None,
) -> bool:
    if not expires or not signature or not expires.isdigit():
        return False

    expected = _signature_for(path, int(expires))
    if not hmac.compare_digest(expected, signature):
        return False

    now = now or datetime.now(timezone.utc)
    return now.timestamp() <= int(expires)


def require_signed_request(request: Request) -> None:
    """
    FastAPI dependency guarding routes reached through signed links.

    Raises:
        InvalidLinkError: Missing, tampered or expired signature
    """
    if not has_valid_signature(
        request.url.path,
        request.query_params.get("expires"),
        request.query_params.get("signature"),
    ):
        logger.info(f"Rejected signed link for {request.url.path}")
        raise InvalidLinkError()
