"""
In-memory state for the stub merchant API.

:class:`MerchantStore` keeps API users, admin merchants, orders and
payments in plain dictionaries guarded by a single lock, since the
development server and the gevent test server both serve requests
concurrently.  Nothing is persisted; each application instance starts
empty.

:class:`FixedWindowRateLimiter` and :class:`FaultQueue` implement the
two behaviours the load harness needs from a target: throttling with
``429`` and scripted failures for retry paths.

Key Concepts Demonstrated:
- Thread-safe in-memory repositories behind a narrow interface
- Fixed-window rate limiting with an injectable clock
- Scripted fault injection for resilience tests
"""

from __future__ import annotations

import secrets
import threading
import time
import uuid
from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash


class DuplicateError(Exception):
    """A unique field (username, email, merchant code) is already taken."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MerchantStore:
    """Users, merchants, orders and payments for one app instance."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._api_users: dict[str, dict[str, Any]] = {}
        self._api_keys: dict[str, str] = {}
        self._merchants: dict[str, dict[str, Any]] = {}
        self._merchant_codes: set[str] = set()
        self._orders: dict[str, dict[str, Any]] = {}
        self._orders_by_key: dict[str, list[str]] = {}
        self._payments: dict[str, dict[str, Any]] = {}
        self._next_merchant_id = 1
        self._next_order_number = 1

    # -- API users -----------------------------------------------------

    def register_api_user(self, username: str, password: str) -> str:
        """Create an API user and return its new API key."""
        api_key = f"pk_{secrets.token_hex(16)}"
        with self._lock:
            if username in self._api_users:
                raise DuplicateError(f"username {username!r} already exists")
            self._api_users[username] = {
                "username": username,
                "password_hash": generate_password_hash(password),
                "api_key": api_key,
            }
            self._api_keys[api_key] = username
            self._orders_by_key[api_key] = []
        return api_key

    def is_valid_api_key(self, api_key: str | None) -> bool:
        with self._lock:
            return bool(api_key) and api_key in self._api_keys

    # -- Admin merchants -----------------------------------------------

    def register_merchant(self, name: str, email: str, password: str, code: str) -> dict[str, Any]:
        """Create an admin merchant and return its public record."""
        password_hash = generate_password_hash(password)
        with self._lock:
            if email in self._merchants:
                raise DuplicateError(f"email {email!r} already registered")
            if code in self._merchant_codes:
                raise DuplicateError(f"merchant code {code!r} already registered")
            merchant = {
                "id": self._next_merchant_id,
                "merchantName": name,
                "email": email,
                "merchantCode": code,
                "role": "MERCHANT",
                "status": "ACTIVE",
                "password_hash": password_hash,
            }
            self._next_merchant_id += 1
            self._merchants[email] = merchant
            self._merchant_codes.add(code)
        return public_merchant(merchant)

    def authenticate_merchant(self, email: str, password: str) -> dict[str, Any] | None:
        """Return the merchant's public record when *password* matches."""
        with self._lock:
            merchant = self._merchants.get(email)
        if merchant is None or not check_password_hash(merchant["password_hash"], password):
            return None
        return public_merchant(merchant)

    # -- Orders ----------------------------------------------------------

    def create_order(self, api_key: str, user_id: int, amount: Decimal, currency: str) -> dict[str, Any]:
        order_id = str(uuid.uuid4())
        created_at = _now_iso()
        with self._lock:
            order = {
                "orderId": order_id,
                "orderNumber": f"ORD-{self._next_order_number:08d}",
                "userId": user_id,
                "amount": f"{amount:.2f}",
                "currency": currency,
                "status": "NEW",
                "createdAt": created_at,
                "updatedAt": created_at,
            }
            self._next_order_number += 1
            self._orders[order_id] = order
            self._orders_by_key[api_key].append(order_id)
        return dict(order)

    def get_order(self, api_key: str, order_id: str) -> dict[str, Any] | None:
        with self._lock:
            if order_id not in self._orders_by_key.get(api_key, ()):
                return None
            return dict(self._orders[order_id])

    def list_orders(self, api_key: str, page: int, size: int) -> dict[str, Any]:
        """Return one page of the key's orders, newest first."""
        with self._lock:
            ids = list(reversed(self._orders_by_key.get(api_key, [])))
            total = len(ids)
            window = ids[page * size:(page + 1) * size]
            orders = [dict(self._orders[order_id]) for order_id in window]
        total_pages = (total + size - 1) // size if size else 0
        return {
            "orders": orders,
            "page": page,
            "size": size,
            "totalElements": total,
            "totalPages": total_pages,
            "first": page == 0,
            "last": page >= total_pages - 1,
        }

    # -- Payments ----------------------------------------------------------

    def request_payment(
        self,
        order_id: str,
        amount: Decimal,
        currency: str,
        channel: str,
        description: str | None,
    ) -> dict[str, Any]:
        transaction_id = str(uuid.uuid4())
        created_at = _now_iso()
        payment = {
            "transactionId": transaction_id,
            "orderId": order_id,
            "amount": f"{amount:.2f}",
            "currency": currency,
            "paymentChannel": channel,
            "description": description,
            "status": "PROCESSING",
            "redirectUrl": f"https://checkout.example.test/{channel.lower()}/{transaction_id}",
            "createdAt": created_at,
            "updatedAt": created_at,
        }
        with self._lock:
            self._payments[transaction_id] = payment
            self._orders[order_id]["status"] = "PROCESSING"
            self._orders[order_id]["updatedAt"] = created_at
        return dict(payment)


def public_merchant(merchant: dict[str, Any]) -> dict[str, Any]:
    """Strip private fields from a merchant record."""
    return {key: value for key, value in merchant.items() if key != "password_hash"}


class FixedWindowRateLimiter:
    """
    Allow at most *limit* requests per *window_s* second window.

    A *limit* of ``0`` (or less) disables limiting.
    """

    def __init__(self, limit: int, window_s: float = 1.0, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_s = window_s
        self._clock = clock
        self._lock = threading.Lock()
        self._window_start = clock()
        self._count = 0

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    def allow(self) -> bool:
        if not self.enabled:
            return True
        with self._lock:
            now = self._clock()
            if now - self._window_start >= self.window_s:
                self._window_start = now
                self._count = 0
            if self._count >= self.limit:
                return False
            self._count += 1
            return True


class FaultQueue:
    """Statuses to return, one per request, before handling resumes."""

    def __init__(self, statuses: Iterable[int] = ()) -> None:
        self._lock = threading.Lock()
        self._pending: deque[int] = deque(statuses)

    def extend(self, statuses: Iterable[int]) -> None:
        with self._lock:
            self._pending.extend(statuses)

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()

    def pop(self) -> int | None:
        with self._lock:
            return self._pending.popleft() if self._pending else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
