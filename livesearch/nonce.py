"""Anti-forgery tokens for the search endpoint.

Tokens are HMAC digests over a time tick and an action name. A tick spans half
of the configured lifetime, and a token is accepted during the tick it was
issued in and the one after, so a page stays usable for at least half a
lifetime after it was rendered.
"""
from __future__ import annotations

import hashlib
import hmac
import math
import time
from typing import Optional

from .config import NONCE_ACTION, settings
from .exceptions import InvalidNonceError

TOKEN_LENGTH = 12


def _tick(now: Optional[float] = None) -> int:
    half_life = max(settings.nonce_lifetime_seconds / 2, 1)
    return math.ceil((time.time() if now is None else now) / half_life)


def _digest(tick: int, action: str) -> str:
    message = f"{tick}|{action}".encode("utf-8")
    return hmac.new(settings.nonce_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()[:TOKEN_LENGTH]


def issue_nonce(action: str = NONCE_ACTION, now: Optional[float] = None) -> str:
    return _digest(_tick(now), action)


def verify_nonce(token: Optional[str], action: str = NONCE_ACTION, now: Optional[float] = None) -> int:
    """Return 1 for a current-tick token, 2 for a previous-tick token, 0 otherwise."""
    if not token:
        return 0
    tick = _tick(now)
    for age, candidate in enumerate((tick, tick - 1), start=1):
        if hmac.compare_digest(_digest(candidate, action).encode("utf-8"), token.encode("utf-8")):
            return age
    return 0


def require_nonce(token: Optional[str], action: str = NONCE_ACTION) -> None:
    if not verify_nonce(token, action):
        raise InvalidNonceError("Invalid security token")
