"""Command-line interface for alchemy-shuffle."""

from .app import app

__all__ = ["app"]
