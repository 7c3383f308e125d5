"""Web API for helix-train."""

from .app import create_app

__all__ = ["create_app"]
