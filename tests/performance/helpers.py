"""
Helper utilities shared by provisioning and Locust scenarios.

Provides the small building blocks every other module relies on:
collision-free identity generation, header builders for the two auth
schemes the payments API uses, and request payload factories.

Key Concepts Demonstrated:
- Collision-free identity generation using timestamp + random suffix
- Randomised order amounts across the seeded pool
"""

from __future__ import annotations

import random
import secrets
import time
from typing import Any

ORDER_LIST_PAGE = 0
ORDER_LIST_SIZE = 20

# 10.00 .. 499.99 expressed in cents.
_MIN_AMOUNT_CENTS = 1_000
_MAX_AMOUNT_CENTS = 50_000



def unique_suffix(prefix: str) -> str:
    """
    Generate an identifier that will not collide across runs.

    Combines a millisecond timestamp with 48 random bits so that parallel
    runs sharing one target instance (or many calls within the same
    millisecond) never produce the same value.

    Args:
        prefix: Human-readable prefix, e.g. ``"perf-user"``.

    Returns:
        ``"<prefix>-<epoch-ms>-<12 hex chars>"``.
    """
    ts = int(time.time() * 1000)
    return f"{prefix}-{ts}-{secrets.token_hex(6)}"


def unique_email(prefix: str = "perf-admin") -> str:
    """Return a unique ``@example.com`` address built on :func:`unique_suffix`."""
    return f"{unique_suffix(prefix)}@example.com"


def unique_merchant_code() -> str:
    """Return a unique merchant code such as ``MC-18F3A2B4C10-9F2E4D1A7B3C``."""
    ts = int(time.time() * 1000)
    return f"MC-{ts:X}-{secrets.token_hex(6).upper()}"


def random_amount() -> str:
    """Pick a monetary amount in ``[10.00, 500.00)`` formatted with two decimals."""
    cents = random.randrange(_MIN_AMOUNT_CENTS, _MAX_AMOUNT_CENTS)
    return f"{cents // 100}.{cents % 100:02d}"


def json_headers(extra: dict[str, str] | None = None) -> dict[str, str]:
    """Headers for JSON request bodies, merged with *extra*."""
    headers = {"Content-Type": "application/json"}
    if extra:
        headers.update(extra)
    return headers


def api_key_header(api_key: str) -> dict[str, str]:
    """Header carrying the merchant API key."""
    return {"X-API-Key": api_key}


def login_payload(email: str, password: str) -> dict[str, str]:
    """Body for ``POST /api/v1/admin/auth/login``."""
    return {"email": email, "password": password}


def order_payload(user_id: int, currency: str) -> dict[str, Any]:
    """Body for ``POST /api/v1/orders`` with a random amount."""
    return {
        "userId": user_id,
        "amount": random_amount(),
        "currency": currency,
    }


def payment_payload(order_id: str, channel: str) -> dict[str, str]:
    """Body for ``POST /api/v1/payment/request``."""
    return {
        "orderId": order_id,
        "amount": "100.00",
        "currency": "USD",
        "paymentChannel": channel,
        "description": "perf payment baseline request",
    }


def order_list_params() -> dict[str, int]:
    """Query string for the paged order listing."""
    return {"page": ORDER_LIST_PAGE, "size": ORDER_LIST_SIZE}
