"""WSGI entry point for the stub merchant API."""

import os

from stub_api import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
