"""
Signed, time-limited admin session tokens.

Token layout: ``b64(payload) + "." + b64(hmac_sha256(secret, payload))`` where
``payload = "admin:<issued_at_millis>"``. Base64 is the URL-safe alphabet
without padding so the value can sit in a cookie unquoted.
"""

import base64
import binascii
import hashlib
import hmac
import logging
import time
from typing import Optional

from .config import get_session_secret

logger = logging.getLogger(__name__)

SESSION_ROLE = "admin"
SESSION_MAX_AGE_SECONDS = 60 * 60 * 24 * 7


def _now_ms() -> int:
    return int(time.time() * 1000)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64encode_std(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode(segment: str) -> bytes:
    s = segment.rstrip("=")
    if "+" in s or "/" in s:
        return base64.b64decode(s + "=" * (-len(s) % 4))
    return base64.urlsafe_b64decode(s + "=" * (-len(s) % 4))


def _sign(payload: str) -> bytes:
    secret = get_session_secret().encode("utf-8")
    return hmac.new(secret, payload.encode("utf-8"), hashlib.sha256).digest()


def issue_session_token(now_ms: Optional[int] = None) -> str:
    issued_at = _now_ms() if now_ms is None else int(now_ms)
    payload = f"{SESSION_ROLE}:{issued_at}"
    return f"{_b64encode(payload.encode('utf-8'))}.{_b64encode(_sign(payload))}"


def verify_session_token(token: Optional[str], now_ms: Optional[int] = None) -> bool:
    if not token or not isinstance(token, str):
        return False

    parts = token.split(".")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return False
    encoded_payload, signature = parts

    try:
        payload = _b64decode(encoded_payload).decode("utf-8")
    except (binascii.Error, ValueError):
        return False

    role, sep, ts = payload.partition(":")
    if not sep or role != SESSION_ROLE or not (ts.isascii() and ts.isdigit()):
        return False

    issued_at = int(ts)
    now = _now_ms() if now_ms is None else int(now_ms)
    if now - issued_at > SESSION_MAX_AGE_SECONDS * 1000:
        logger.debug("[session] token expired")
        return False

    # Accept exactly the URL-safe unpadded form or exactly the standard
    # padded form, with payload and signature in the same alphabet.
    mac = _sign(payload)
    raw_payload = payload.encode("utf-8")
    presented = f"{encoded_payload}.{signature}".encode("utf-8")
    url_form = f"{_b64encode(raw_payload)}.{_b64encode(mac)}".encode("ascii")
    std_form = f"{_b64encode_std(raw_payload)}.{_b64encode_std(mac)}".encode("ascii")
    url_ok = hmac.compare_digest(presented, url_form)
    std_ok = hmac.compare_digest(presented, std_form)
    return url_ok or std_ok
