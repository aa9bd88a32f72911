"""Signed gallery access tokens.

Token format: ``{year}.{expiresAt}.{hex(HMAC-SHA256(secret, "{year}.{expiresAt}"))}``
where ``expiresAt`` is in epoch seconds. Tokens are stateless; they stop
verifying when they expire or when the year's secret is rotated.
"""
import hashlib
import hmac
import time
from typing import Optional

from ..config import TOKEN_EXPIRY_SECONDS


def _signature(secret: str, payload: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def mint(secret: str, year: int | str, expires_at: int) -> str:
    """Create a token binding ``year`` and ``expires_at`` to ``secret``."""
    payload = f"{year}.{expires_at}"
    return f"{payload}.{_signature(secret, payload)}"


def verify(secret: str, token: str, expected_year: int | str, now: float) -> bool:
    """Check a token against the year it claims and the current time.

    Fails closed: any malformed, expired, mismatched or forged token
    yields False, never an exception.
    """
    if not isinstance(token, str) or not secret:
        return False

    parts = token.strip().split(".")
    if len(parts) != 3:
        return False

    year_str, expires_str, signature = parts
    if year_str != str(expected_year):
        return False

    if not (expires_str.isascii() and expires_str.isdigit()):
        return False
    if int(expires_str) < now:
        return False

    expected = _signature(secret, f"{year_str}.{expires_str}")
    # compare_digest returns False on length mismatch
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def new_expiry(now: Optional[float] = None) -> int:
    """Expiry (epoch seconds) for a token minted at ``now``."""
    return int(now if now is not None else time.time()) + TOKEN_EXPIRY_SECONDS
