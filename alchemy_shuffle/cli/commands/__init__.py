"""CLI commands for alchemy-shuffle."""

from . import (
    randomize,
    inspect,
    config_cmd,
)

__all__ = [
    "randomize",
    "inspect",
    "config_cmd",
]
