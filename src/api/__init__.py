"""HTTP API for the TaskFlow reminder service."""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
