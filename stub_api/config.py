"""
Configuration for the stub merchant API.

Follows Flask's recommended pattern: a shared ``Config`` base class holds
defaults read from the environment, and environment-specific subclasses
(``DevelopmentConfig``, ``TestingConfig``, ``ProductionConfig``) override
only what differs.  ``get_config`` resolves the class from an explicit
name or ``FLASK_ENV``.

Two knobs exist purely to exercise the load harness:

- ``RATE_LIMIT_PER_SECOND``: requests allowed per one-second window
  across all ``/api/v1`` endpoints; excess requests get ``429``.  ``0``
  disables the limiter.
- ``FAIL_NEXT``: comma-separated statuses (``"503,503"``) returned, one
  per request, before normal handling resumes.
"""

from __future__ import annotations

import os


def _status_list(raw: str | None) -> list[int]:
    """Parse ``"503, 502"`` into ``[503, 502]``, ignoring blanks."""
    if not raw:
        return []
    return [int(part) for part in raw.split(",") if part.strip()]


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    JWT_EXPIRY_HOURS: int = int(os.environ.get("JWT_EXPIRY_HOURS", "24"))
    RATE_LIMIT_PER_SECOND: int = int(os.environ.get("RATE_LIMIT_PER_SECOND", "0"))
    FAIL_NEXT: list[int] = _status_list(os.environ.get("FAIL_NEXT"))
    PAYMENT_CHANNELS: tuple[str, ...] = ("STRIPE", "PAYPAL")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True
    SECRET_KEY: str = "testing-secret-key-with-at-least-32-bytes"

    # Tests opt in to throttling and faults explicitly.
    RATE_LIMIT_PER_SECOND: int = 0
    FAIL_NEXT: list[int] = []


class ProductionConfig(Config):
    """Production-like configuration for shared perf environments."""

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
