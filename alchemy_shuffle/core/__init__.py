"""Core models shared across alchemy-shuffle."""
