"""
REST endpoints of the stub merchant API.

Endpoints (mounted under ``/api/v1``):
    GET  /health                 -- Liveness probe (never throttled)
    POST /auth/register          -- Register an API user, returns ``apiKey``
    POST /admin/auth/register    -- Register an admin merchant
    POST /admin/auth/login       -- Admin login, returns a JWT ``token``
    GET  /admin/auth/me          -- Identity behind an admin Bearer token
    POST /orders                 -- Create an order (``X-API-Key``)
    GET  /orders                 -- Page through the key's orders (``X-API-Key``)
    POST /payment/request        -- Request payment for an order (``X-API-Key``)
    POST /_stub/faults           -- Queue statuses for the next requests

Every request except the health probe passes through fault injection
first and the rate limiter second, the way a gateway filter chain would.

Key Concepts Demonstrated:
- Blueprint-based route organisation
- ``before_request`` hooks for cross-cutting gateway behaviour
- Input validation before touching the store
- Consistent JSON error responses
"""

from __future__ import annotations

import logging
import os
from decimal import Decimal, InvalidOperation
from typing import Any

import jwt
from flask import Blueprint, Response, current_app, jsonify, request

from stub_api.store import DuplicateError
from stub_api.tokens import create_token, decode_token

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

API_KEY_HEADER = "X-API-Key"
MAX_PAGE_SIZE = 100
UNGUARDED_ENDPOINTS = {"api.health_check", "api.queue_faults"}


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def _json_error(message: str, status_code: int) -> tuple[Response, int]:
    """Build a ``{"error": "..."}`` response."""
    return jsonify({"error": message}), status_code


def _store():
    return current_app.extensions["merchant_store"]


def _validate_required_fields(data: dict[str, Any], required_fields: list[str]) -> str | None:
    """
    Check that all *required_fields* are present and non-blank in *data*.

    Returns:
        An error message for the first missing or blank field, or ``None``.
    """
    for field in required_fields:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            return f"'{field}' is required"
    return None


def _parse_amount(value: Any) -> Decimal | None:
    """Parse a positive decimal amount with at most two decimal places."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0 or amount.as_tuple().exponent < -2:
        return None
    return amount


def _valid_currency(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 3 and value.isalpha() and value.isupper()


def _require_api_key() -> str | None:
    api_key = request.headers.get(API_KEY_HEADER, "").strip()
    return api_key if _store().is_valid_api_key(api_key) else None


def _query_int(name: str, default: int) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return None


# -----------------------------------------------------------------------------
# Gateway filters
# -----------------------------------------------------------------------------

@api_bp.before_request
def apply_gateway_filters() -> tuple[Response, int] | None:
    """Injected faults first, then the fixed-window rate limit."""
    if request.endpoint in UNGUARDED_ENDPOINTS:
        return None

    fault = current_app.extensions["fault_queue"].pop()
    if fault is not None:
        logger.info("Injected fault %d for %s %s", fault, request.method, request.path)
        return _json_error("injected fault", fault)

    if not current_app.extensions["rate_limiter"].allow():
        return _json_error("rate limit exceeded", 429)
    return None


# -----------------------------------------------------------------------------
# API Endpoints
# -----------------------------------------------------------------------------

@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for deployment verification."""
    return jsonify({
        "status": "healthy",
        "service": "stub-merchant-api",
        "environment": os.getenv("ENVIRONMENT", "unknown"),
    }), 200


@api_bp.route("/auth/register", methods=["POST"])
def register_api_user() -> tuple[Response, int]:
    """
    Register an API user.

    Returns:
        201 with ``{"username", "apiKey"}``.
        400 if ``username`` or ``password`` is missing.
        409 if the username is taken.
    """
    data = request.get_json(silent=True) or {}
    missing = _validate_required_fields(data, ["username", "password"])
    if missing:
        return _json_error(missing, 400)

    username = data["username"].strip()
    try:
        api_key = _store().register_api_user(username, data["password"])
    except DuplicateError as exc:
        return _json_error(str(exc), 409)

    logger.info("Registered API user %s", username)
    return jsonify({"username": username, "apiKey": api_key}), 201


@api_bp.route("/admin/auth/register", methods=["POST"])
def register_merchant() -> tuple[Response, int]:
    """
    Register an admin merchant and log it in.

    Returns:
        200 with a login response (``token``, ``tokenType``,
        ``expiresIn``, ``merchant``).
        400 if a field is missing.
        409 if the email or merchant code is taken.
    """
    data = request.get_json(silent=True) or {}
    missing = _validate_required_fields(data, ["merchantName", "email", "password", "merchantCode"])
    if missing:
        return _json_error(missing, 400)

    try:
        merchant = _store().register_merchant(
            data["merchantName"].strip(),
            data["email"].strip().lower(),
            data["password"],
            data["merchantCode"].strip(),
        )
    except DuplicateError as exc:
        return _json_error(str(exc), 409)

    logger.info("Registered merchant %s", merchant["email"])
    return jsonify(_login_response(merchant)), 200


@api_bp.route("/admin/auth/login", methods=["POST"])
def login_merchant() -> tuple[Response, int]:
    """
    Authenticate an admin merchant.

    Returns:
        200 with ``token`` and the merchant record.
        400 if ``email`` or ``password`` is missing.
        401 on bad credentials.
    """
    data = request.get_json(silent=True) or {}
    missing = _validate_required_fields(data, ["email", "password"])
    if missing:
        return _json_error(missing, 400)

    merchant = _store().authenticate_merchant(data["email"].strip().lower(), data["password"])
    if merchant is None:
        return _json_error("Invalid email or password", 401)
    return jsonify(_login_response(merchant)), 200


@api_bp.route("/admin/auth/me", methods=["GET"])
def current_merchant() -> tuple[Response, int]:
    """Return the claims of a valid admin Bearer token."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return _json_error("Missing bearer token", 401)
    try:
        claims = decode_token(auth_header[7:].strip(), current_app.config["SECRET_KEY"])
    except jwt.InvalidTokenError:
        return _json_error("Invalid or expired token", 401)
    return jsonify({"merchantId": claims["merchant_id"], "email": claims["email"]}), 200


@api_bp.route("/orders", methods=["POST"])
def create_order() -> tuple[Response, int]:
    """
    Create an order for the calling API key.

    Returns:
        201 with the order (``orderId``, ``orderNumber``, ``status``...).
        400 on an invalid ``userId``, ``amount`` or ``currency``.
        401 without a valid ``X-API-Key``.
    """
    api_key = _require_api_key()
    if api_key is None:
        return _json_error("Missing or invalid API key", 401)

    data = request.get_json(silent=True) or {}
    user_id = data.get("userId")
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        return _json_error("'userId' must be a positive integer", 400)
    amount = _parse_amount(data.get("amount"))
    if amount is None:
        return _json_error("'amount' must be a positive decimal with two places", 400)
    if not _valid_currency(data.get("currency")):
        return _json_error("'currency' must be a three-letter ISO code", 400)

    order = _store().create_order(api_key, user_id, amount, data["currency"])
    return jsonify(order), 201


@api_bp.route("/orders", methods=["GET"])
def list_orders() -> tuple[Response, int]:
    """
    List the calling key's orders.

    Query Parameters:
        page: Zero-based page number (default 0)
        size: Page size, 1..100 (default 20)
    """
    api_key = _require_api_key()
    if api_key is None:
        return _json_error("Missing or invalid API key", 401)

    page = _query_int("page", 0)
    size = _query_int("size", 20)
    if page is None or page < 0:
        return _json_error("'page' must be a non-negative integer", 400)
    if size is None or not 1 <= size <= MAX_PAGE_SIZE:
        return _json_error(f"'size' must be between 1 and {MAX_PAGE_SIZE}", 400)

    return jsonify(_store().list_orders(api_key, page, size)), 200


@api_bp.route("/payment/request", methods=["POST"])
def request_payment() -> tuple[Response, int]:
    """
    Request payment for one of the calling key's orders.

    Returns:
        200 with the payment (``transactionId``, ``status``...).
        400 on an invalid amount, currency or channel.
        401 without a valid ``X-API-Key``.
        404 if the order does not belong to the key.
    """
    api_key = _require_api_key()
    if api_key is None:
        return _json_error("Missing or invalid API key", 401)

    data = request.get_json(silent=True) or {}
    missing = _validate_required_fields(data, ["orderId", "paymentChannel"])
    if missing:
        return _json_error(missing, 400)
    amount = _parse_amount(data.get("amount"))
    if amount is None:
        return _json_error("'amount' must be a positive decimal with two places", 400)
    if not _valid_currency(data.get("currency")):
        return _json_error("'currency' must be a three-letter ISO code", 400)
    channel = data["paymentChannel"].strip().upper()
    if channel not in current_app.config["PAYMENT_CHANNELS"]:
        return _json_error(f"Unsupported payment channel: {channel}", 400)

    store = _store()
    if store.get_order(api_key, data["orderId"]) is None:
        return _json_error("Order not found", 404)

    payment = store.request_payment(
        data["orderId"], amount, data["currency"], channel, data.get("description")
    )
    return jsonify(payment), 200


@api_bp.route("/_stub/faults", methods=["POST", "DELETE"])
def queue_faults() -> tuple[Response, int]:
    """
    Queue statuses to return for the next requests, or clear the queue.

    Body for POST: ``{"statuses": [503, 503]}``.
    """
    faults = current_app.extensions["fault_queue"]
    if request.method == "DELETE":
        faults.clear()
        return jsonify({"pending": 0}), 200

    data = request.get_json(silent=True) or {}
    statuses = data.get("statuses")
    if not isinstance(statuses, list) or not all(
        isinstance(status, int) and 100 <= status <= 599 for status in statuses
    ):
        return _json_error("'statuses' must be a list of HTTP status codes", 400)
    faults.extend(statuses)
    return jsonify({"pending": len(faults)}), 200


def _login_response(merchant: dict[str, Any]) -> dict[str, Any]:
    expiry_hours = int(current_app.config["JWT_EXPIRY_HOURS"])
    return {
        "token": create_token(merchant, current_app.config["SECRET_KEY"], expiry_hours),
        "tokenType": "Bearer",
        "expiresIn": expiry_hours * 3600,
        "merchant": merchant,
    }
