"""Typed callback protocols for progress reporting."""

from typing import Protocol


class ItemProgressCallback(Protocol):
    """Callback for item-based progress (ingredient assignment).

    Args:
        current: Number of records processed so far
        total: Total records to process
    """

    def __call__(self, current: int, total: int) -> None: ...
