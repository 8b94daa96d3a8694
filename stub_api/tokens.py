"""
Admin session tokens for the stub merchant API.

Admin login returns a JWT signed with HS256 and the app's ``SECRET_KEY``.
The real platform signs asymmetrically; the stub only needs tokens that
look and decode like the real ones.

Token claims:
    - ``merchant_id`` -- integer id of the admin merchant.
    - ``email``       -- the merchant's login email.
    - ``role``        -- always ``MERCHANT`` for self-registered accounts.
    - ``iat``/``exp`` -- issued-at and expiry, UTC epoch seconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

ALGORITHM = "HS256"


def create_token(merchant: dict[str, Any], secret: str, expiry_hours: int) -> str:
    """
    Create an HS256-signed JWT for an authenticated merchant.

    Args:
        merchant: Public merchant record (``id``, ``email``, ``role``).
        secret: Signing secret.
        expiry_hours: Number of hours from *now* until the token expires.

    Returns:
        A compact JWS string.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "merchant_id": int(merchant["id"]),
        "email": merchant["email"],
        "role": merchant.get("role", "MERCHANT"),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=int(expiry_hours))).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> dict[str, Any]:
    """
    Verify and decode a token issued by :func:`create_token`.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired or
            signed with another secret.
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[ALGORITHM],
        options={"require": ["merchant_id", "email", "iat", "exp"]},
    )
