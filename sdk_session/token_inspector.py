"""Unverified token inspection.

The token is issued by the API itself; the client only reads its `exp` claim
to avoid using a token it can prove is stale. Decoding is total: anything that
cannot be read yields `Claims(expires_at=None)`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt


UTC = timezone.utc


def now_utc() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Claims:
    expires_at: Optional[datetime] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def seconds_until_expiry(self, now: Optional[datetime] = None) -> Optional[float]:
        if self.expires_at is None:
            return None
        now = now or now_utc()
        return (self.expires_at - now).total_seconds()


def _expiry(payload: Dict[str, Any]) -> Optional[datetime]:
    exp = payload.get("exp")
    if exp is None or isinstance(exp, bool):
        return None
    try:
        return datetime.fromtimestamp(float(exp), UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def decode(token: Any) -> Claims:
    if not isinstance(token, str) or not token:
        return Claims()
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except (jwt.PyJWTError, ValueError):
        return Claims()
    if not isinstance(payload, dict):
        return Claims()
    return Claims(expires_at=_expiry(payload), payload=payload)


__all__ = ["Claims", "decode", "now_utc", "UTC"]
