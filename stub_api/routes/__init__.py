"""Route blueprints for the stub merchant API."""
