from __future__ import annotations

import base64
import json
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class TokenValidation:
    valid: bool
    reason: str | None = None
    expires_at: datetime | None = None


def decode_claims(token: str) -> dict[str, Any] | None:
    """Return the JWT payload without verifying the signature, or None if unreadable."""
    parts = token.split(".")
    if len(parts) != 3:
        return None

    payload_part = parts[1]
    padded = payload_part + ("=" * (-len(payload_part) % 4))
    try:
        decoded = base64.urlsafe_b64decode(padded.encode("utf-8")).decode("utf-8")
        payload = json.loads(decoded)
    except (ValueError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def validate_token(token: str | None, now_utc: datetime | None = None) -> TokenValidation:
    if not token:
        return TokenValidation(valid=False, reason="missing_token")

    claims = decode_claims(token)
    if claims is None:
        return TokenValidation(valid=False, reason="corrupt_token")

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or (isinstance(exp, float) and math.isnan(exp)):
        return TokenValidation(valid=False, reason="corrupt_token")

    now = now_utc or datetime.now(tz=timezone.utc)
    expired = exp * 1000 < now.timestamp() * 1000
    expires_at = _expiry_datetime(exp)
    if expired:
        return TokenValidation(valid=False, reason="expired_token", expires_at=expires_at)

    return TokenValidation(valid=True, expires_at=expires_at)


def _expiry_datetime(exp: int | float) -> datetime | None:
    # exp beyond the datetime range is still a valid, far-future expiry
    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
