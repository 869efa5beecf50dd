"""Shared utilities."""

from .callbacks import ItemProgressCallback

__all__ = ["ItemProgressCallback"]
