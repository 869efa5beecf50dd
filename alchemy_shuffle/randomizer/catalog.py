"""Effect catalog: every effect occurrence in the load order plus its counts.

The catalog owns two views of the same data:

- items: the occurrence list, shuffled once at build time
- occurrence_counts: live occurrences per effect id

All removals go through remove(), which updates both, so
sum(occurrence_counts.values()) == len(items) holds at all times.

A third, independent view (pending_unique) lists every distinct effect id
that the inclusion strategy has not dispensed yet.
"""

import logging
import random
from collections import deque
from typing import Iterable

from ..core.models import EffectRecord
from .errors import CatalogInvariantError

logger = logging.getLogger(__name__)


class EffectCatalog:
    """Occurrence pool with per-identity counts.

    Args:
        items: Effect occurrences, used in the given order
        rng: Random source for the picks and reshuffles
    """

    def __init__(self, items: Iterable[EffectRecord], rng: random.Random):
        self.rng = rng
        self.items: list[EffectRecord] = list(items)
        self.occurrence_counts: dict[str, int] = {}
        for record in self.items:
            effect_id = record.linked_effect_id
            self.occurrence_counts[effect_id] = (
                self.occurrence_counts.get(effect_id, 0) + 1
            )
        self.pending_unique: deque[str] = deque(self.occurrence_counts)
        self.dispensed_unique: list[str] = []

    @classmethod
    def build(
        cls, occurrences: Iterable[EffectRecord], rng: random.Random
    ) -> "EffectCatalog":
        """Shuffle the harvested occurrences and build a catalog from them."""
        items = list(occurrences)
        rng.shuffle(items)
        catalog = cls(items, rng)
        logger.info(
            "Built effect catalog: %d occurrences, %d distinct effects",
            catalog.total,
            len(catalog.occurrence_counts),
        )
        return catalog

    # ── Read-only views ──

    @property
    def total(self) -> int:
        """Number of live occurrences."""
        return len(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def distinct_ids(self, exclude_id: str | None = None) -> list[str]:
        """Effect ids currently present, in first-seen order."""
        return [
            effect_id
            for effect_id, count in self.occurrence_counts.items()
            if count > 0 and effect_id != exclude_id
        ]

    def frequency_table(self) -> list[tuple[str, str, int]]:
        """(effect id, display name, count) rows, most frequent first."""
        names: dict[str, str] = {}
        for record in self.items:
            names.setdefault(record.linked_effect_id, record.display_name)
        rows = [
            (effect_id, names.get(effect_id, effect_id), count)
            for effect_id, count in self.occurrence_counts.items()
        ]
        return sorted(rows, key=lambda row: -row[2])

    def find_first(self, effect_id: str) -> tuple[int, EffectRecord]:
        """Return (index, occurrence) of the first occurrence of effect_id.

        Raises:
            CatalogInvariantError: If no occurrence of effect_id is left.
        """
        for index, record in enumerate(self.items):
            if record.linked_effect_id == effect_id:
                return index, record
        raise CatalogInvariantError(f"Effect {effect_id} is not in the catalog")

    # ── Mutation ──

    def remove(self, index: int) -> EffectRecord:
        """Delete the occurrence at index and decrement its count."""
        record = self.items.pop(index)
        effect_id = record.linked_effect_id
        remaining = self.occurrence_counts[effect_id] - 1
        if remaining > 0:
            self.occurrence_counts[effect_id] = remaining
        else:
            del self.occurrence_counts[effect_id]
        return record

    def consume(self, record: EffectRecord) -> None:
        """Remove this exact occurrence (not just any of the same effect)."""
        for index, candidate in enumerate(self.items):
            if candidate is record:
                self.remove(index)
                return
        raise CatalogInvariantError(
            f"Occurrence of {record.linked_effect_id} was already removed"
        )

    # ── Picks ──

    def most_frequent(self, exclude_id: str | None = None) -> EffectRecord:
        """First occurrence of the effect with the highest live count.

        Ties go to the effect seen first in count order. exclude_id is left
        out of consideration entirely.
        """
        best_id: str | None = None
        best_count = 0
        for effect_id, count in self.occurrence_counts.items():
            if effect_id == exclude_id:
                continue
            if count > best_count:
                best_id = effect_id
                best_count = count
        if best_id is None:
            raise CatalogInvariantError("No eligible effects left in the catalog")
        return self.find_first(best_id)[1]

    def take_next_unique(self, exclude_id: str | None = None) -> EffectRecord | None:
        """Dispense the next never-dispensed effect id.

        If the front of the queue is exclude_id, the second entry is taken
        instead and the excluded id stays at the front. Returns None when
        nothing can be dispensed; callers fall back to another pick.
        """
        if not self.pending_unique:
            return None
        if self.pending_unique[0] == exclude_id:
            if len(self.pending_unique) < 2:
                return None
            effect_id = self.pending_unique[1]
            del self.pending_unique[1]
        else:
            effect_id = self.pending_unique.popleft()
        self.dispensed_unique.append(effect_id)
        return self.find_first(effect_id)[1]

    def uniform_random_from_distinct(
        self, exclude_id: str | None = None
    ) -> EffectRecord:
        """Pick uniformly among distinct effect ids, ignoring frequency.

        Reshuffles items, so the occurrence returned for the chosen id is
        random and later linear scans see a new order.
        """
        candidates = self.distinct_ids(exclude_id)
        if not candidates:
            raise CatalogInvariantError("No eligible effects left in the catalog")
        effect_id = self.rng.choice(candidates)
        self.rng.shuffle(self.items)
        return self.find_first(effect_id)[1]

    def weighted_random_from_pool(
        self, exclude_id: str | None = None
    ) -> EffectRecord:
        """Pick uniformly among remaining occurrences (frequency-weighted)."""
        if exclude_id is None:
            pool = self.items
        else:
            pool = [r for r in self.items if r.linked_effect_id != exclude_id]
        if not pool:
            raise CatalogInvariantError("No eligible effects left in the catalog")
        return self.rng.choice(pool)
