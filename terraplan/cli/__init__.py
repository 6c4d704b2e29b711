"""Command-line interface for terraplan."""

from .app import app

__all__ = ["app"]
