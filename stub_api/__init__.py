"""
Flask application factory for the stub merchant API.

The stub stands in for the payment platform's API gateway during local
smoke runs and integration tests of the load harness.  It serves the
same six endpoints the harness calls under ``/api/v1`` from an in-memory
store, and can be told to throttle (``RATE_LIMIT_PER_SECOND``) or to fail
the next few requests (``FAIL_NEXT``).
"""

from __future__ import annotations

import logging

from flask import Flask

from stub_api.config import get_config
from stub_api.store import FaultQueue, FixedWindowRateLimiter, MerchantStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.
        **overrides: Config values applied after the config class, e.g.
                     ``RATE_LIMIT_PER_SECOND=5`` in tests.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config.update(overrides)

    logger.info(f"Creating stub API with config: {config_class.__name__}")

    app.extensions["merchant_store"] = MerchantStore()
    app.extensions["rate_limiter"] = FixedWindowRateLimiter(int(app.config["RATE_LIMIT_PER_SECOND"]))
    app.extensions["fault_queue"] = FaultQueue(app.config["FAIL_NEXT"])

    # Register blueprints
    from stub_api.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api/v1")

    return app
