"""Assigners: write new effects onto one ingredient record at a time.

SlotAssigner fills the four slots one by one from a sampling strategy.
GroupAssigner hands out whole original effect groups from a shuffled
permutation.
"""

import logging
import random
from typing import Any, Sequence

from ..core.models import (
    EFFECT_SLOTS,
    AssignmentRecord,
    EffectRecord,
    EffectSummary,
)
from ..store.base import RecordStore
from .catalog import EffectCatalog
from .errors import CatalogInvariantError, ConfigurationError, StarvationError
from .strategies import SamplingStrategy

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 1000


def effect_record_from(store: RecordStore, occurrence: Any) -> EffectRecord:
    """Read an occurrence from the store into an EffectRecord."""
    fields = store.read_effect_fields(occurrence)
    return EffectRecord(
        source_handle=occurrence,
        linked_effect_id=fields.effect_id,
        display_name=fields.name,
        magnitude=fields.magnitude,
        area=fields.area,
        duration=fields.duration,
    )


def _summaries_from_store(store: RecordStore, record: Any) -> list[EffectSummary]:
    return [
        EffectSummary.from_record(effect_record_from(store, occurrence))
        for occurrence in store.get_effect_occurrences(record)
    ]


class SlotAssigner:
    """Fills the effect slots of one record with pairwise-distinct effects.

    Each slot is retried until the strategy returns an effect the record
    does not have yet. There is no backtracking across slots. Retries are
    capped at max_retries per slot, and a pool with fewer than four
    distinct effects is rejected before any slot is written.

    Args:
        store: Record store to write slots through
        catalog: Effect pool the strategy picks from
        strategy: Sampling strategy for the configured mode
        max_retries: Attempts per slot before giving up
    """

    def __init__(
        self,
        store: RecordStore,
        catalog: EffectCatalog,
        strategy: SamplingStrategy,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        if max_retries < 1:
            raise ConfigurationError(f"max_retries must be >= 1, got {max_retries}")
        self.store = store
        self.catalog = catalog
        self.strategy = strategy
        self.max_retries = max_retries

    def _check_supply(self, record_name: str) -> None:
        distinct = self.catalog.distinct_ids()
        if len(distinct) < EFFECT_SLOTS:
            raise StarvationError(
                f"Cannot assign {EFFECT_SLOTS} distinct effects to {record_name}: "
                f"only {len(distinct)} distinct effect(s) left in the pool"
            )

    def _pick_distinct(
        self, slot_index: int, accepted: list[EffectRecord], record_name: str
    ) -> EffectRecord:
        taken = {effect.linked_effect_id for effect in accepted}
        for _ in range(self.max_retries):
            candidate = self.strategy.pick(slot_index)
            if candidate.linked_effect_id not in taken:
                return candidate
        logger.warning(
            "Gave up on slot %d of %s after %d attempts",
            slot_index,
            record_name,
            self.max_retries,
        )
        raise StarvationError(
            f"No distinct effect found for slot {slot_index} of {record_name} "
            f"after {self.max_retries} attempts"
        )

    def assign(self, record: Any) -> AssignmentRecord:
        """Overwrite all effect slots of record and describe the change."""
        record_name = self.store.record_name(record)
        original = _summaries_from_store(self.store, record)
        self._check_supply(record_name)

        accepted: list[EffectRecord] = []
        for slot_index in range(EFFECT_SLOTS):
            effect = self._pick_distinct(slot_index, accepted, record_name)
            accepted.append(effect)
            self.store.write_effect_slot(record, slot_index, effect.source_handle)
            if self.strategy.consumes:
                self.catalog.consume(effect)

        logger.debug(
            "%s: %s",
            record_name,
            ", ".join(effect.display_name or effect.linked_effect_id for effect in accepted),
        )
        return AssignmentRecord(
            form_id=self.store.record_form_id(record),
            record_name=record_name,
            original=original,
            assigned=[EffectSummary.from_record(effect) for effect in accepted],
        )


class GroupAssigner:
    """Gives each record one whole original effect group.

    The groups are shuffled once (Random.shuffle, a Fisher-Yates pass) and
    handed out in that order, one per record. A record can get its own group
    back.

    Args:
        store: Record store to write groups through
        groups: Effect group handles, one per source record
        rng: Random source for the permutation
    """

    def __init__(self, store: RecordStore, groups: Sequence[Any], rng: random.Random):
        self.store = store
        self.groups = list(groups)
        rng.shuffle(self.groups)
        self._next = 0

    @property
    def remaining(self) -> int:
        return len(self.groups) - self._next

    def assign(self, record: Any) -> AssignmentRecord:
        """Overwrite the record's effects with the next group in the permutation."""
        if self._next >= len(self.groups):
            raise CatalogInvariantError(
                f"Group permutation exhausted after {len(self.groups)} records"
            )
        group = self.groups[self._next]
        self._next += 1

        record_name = self.store.record_name(record)
        original = _summaries_from_store(self.store, record)
        self.store.write_effect_group(record, group)

        assigned = [
            EffectSummary(
                effect_id=fields.effect_id,
                name=fields.name,
                magnitude=fields.magnitude,
                area=fields.area,
                duration=fields.duration,
            )
            for fields in self.store.read_group_fields(group)
        ]
        logger.debug("%s: took effect group %s", record_name, group)
        return AssignmentRecord(
            form_id=self.store.record_form_id(record),
            record_name=record_name,
            original=original,
            assigned=assigned,
        )
