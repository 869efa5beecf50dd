"""Tests for the slot and group assigners."""

import random
from collections import Counter

import pytest

from alchemy_shuffle.core.models import PARALYSIS_EFFECT_ID
from alchemy_shuffle.randomizer import (
    CatalogInvariantError,
    ConfigurationError,
    EffectCatalog,
    GroupAssigner,
    RandomizationMode,
    SamplingStrategy,
    SlotAssigner,
    StarvationError,
    create_strategy,
)
from alchemy_shuffle.randomizer.assigners import effect_record_from


def _catalog_for(store, seed: int = 0) -> EffectCatalog:
    occurrences = [
        effect_record_from(store, occurrence)
        for record in store.list_source_records()
        for occurrence in store.get_effect_occurrences(record)
    ]
    return EffectCatalog.build(occurrences, random.Random(seed))


def _slot_assigner(store, mode, seed: int = 0, ignore_dist: bool = False, **kwargs):
    catalog = _catalog_for(store, seed=seed)
    strategy = create_strategy(RandomizationMode(mode), catalog, ignore_dist=ignore_dist)
    return SlotAssigner(store, catalog, strategy, **kwargs), catalog


class _RepeatFirstStrategy(SamplingStrategy):
    """Always proposes the same occurrence."""

    def __init__(self, catalog):
        super().__init__(catalog)
        self.calls = 0

    def pick(self, slot_index):
        self.calls += 1
        return self.catalog.items[0]


class TestSlotAssigner:
    """Tests for per-slot assignment."""

    @pytest.mark.parametrize(
        "mode,ignore_dist",
        [
            ("no_inclusion", False),
            ("no_inclusion", True),
            ("inclusion", False),
            ("inclusion", True),
        ],
    )
    def test_slots_are_distinct_and_slot_zero_not_paralysis(
        self, make_store, shared_groups, mode, ignore_dist
    ):
        for seed in range(10):
            store = make_store(shared_groups)
            assigner, _ = _slot_assigner(store, mode, seed=seed, ignore_dist=ignore_dist)
            for record in store.list_source_records():
                assignment = assigner.assign(record)
                ids = [effect.effect_id for effect in assignment.assigned]
                assert len(ids) == 4
                assert len(set(ids)) == 4
                assert ids[0] != PARALYSIS_EFFECT_ID

    def test_writes_match_assignment(self, make_store, shared_groups):
        store = make_store(shared_groups)
        assigner, _ = _slot_assigner(store, "no_inclusion", seed=3)
        record = store.list_source_records()[0]
        assignment = assigner.assign(record)
        patched = store.patched_records()[0]
        assert patched.form_id == record.form_id
        assert [e.effect_id for e in patched.effects] == [
            e.effect_id for e in assignment.assigned
        ]

    def test_field_copy_is_exact(self, make_store, shared_groups):
        """Assigned effects carry the magnitude/area/duration of their source."""
        store = make_store(shared_groups)
        originals = [
            store.read_effect_fields(occurrence)
            for record in store.list_source_records()
            for occurrence in store.get_effect_occurrences(record)
        ]
        assigner, _ = _slot_assigner(store, "no_inclusion", seed=8)
        for record in store.list_source_records():
            assigner.assign(record)
        for patched in store.patched_records():
            for effect in patched.effects:
                assert effect in originals

    def test_original_effects_reported(self, make_store, shared_groups):
        store = make_store(shared_groups)
        assigner, _ = _slot_assigner(store, "no_inclusion")
        record = store.list_source_records()[2]
        assignment = assigner.assign(record)
        assert [e.effect_id for e in assignment.original] == shared_groups[
            record.form_id
        ]
        assert assignment.record_name == f"Ingredient {record.form_id}"

    def test_distribution_consumes_four_per_record(self, make_store, distinct_groups):
        store = make_store(distinct_groups)
        assigner, catalog = _slot_assigner(store, "dist", seed=5)
        original_total = catalog.total
        for n, record in enumerate(store.list_source_records()[:3], 1):
            assigner.assign(record)
            assert sum(catalog.occurrence_counts.values()) == original_total - 4 * n
            assert catalog.total == original_total - 4 * n

    def test_distribution_slot_zero_skips_most_frequent_paralysis(self, make_store):
        """Paralysis has the highest count but never lands in slot 0."""
        groups = {
            "00010001": [PARALYSIS_EFFECT_ID, "0003EB15", "0003EB16", "0003EB17"],
            "00010002": [PARALYSIS_EFFECT_ID, "0003EAF3", "0003EB01", "0003EB02"],
            "00010003": [PARALYSIS_EFFECT_ID, "0003EB06", "0003EB07", "000A0001"],
        }
        for seed in range(10):
            store = make_store(groups)
            assigner, catalog = _slot_assigner(store, "dist", seed=seed)
            assert catalog.most_frequent().linked_effect_id == PARALYSIS_EFFECT_ID
            assignment = assigner.assign(store.list_source_records()[0])
            ids = [e.effect_id for e in assignment.assigned]
            assert ids[0] != PARALYSIS_EFFECT_ID
            assert len(set(ids)) == 4

    def test_non_distribution_modes_do_not_consume(self, make_store, shared_groups):
        store = make_store(shared_groups)
        assigner, catalog = _slot_assigner(store, "inclusion", seed=5)
        for record in store.list_source_records():
            assigner.assign(record)
        assert catalog.total == 24

    def test_starved_pool_raises_before_writing(self, make_store):
        store = make_store({"00010001": ["0003EB15", "0003EB16", "0003EB15", "0003EB16"]})
        assigner, _ = _slot_assigner(store, "no_inclusion")
        with pytest.raises(StarvationError, match="only 2 distinct"):
            assigner.assign(store.list_source_records()[0])
        assert store.patched_records() == []

    def test_retry_budget_is_bounded(self, make_store, shared_groups):
        store = make_store(shared_groups)
        catalog = _catalog_for(store)
        strategy = _RepeatFirstStrategy(catalog)
        assigner = SlotAssigner(store, catalog, strategy, max_retries=25)
        with pytest.raises(StarvationError, match="after 25 attempts"):
            assigner.assign(store.list_source_records()[0])
        # One accepted pick for slot 0, then 25 rejected picks for slot 1
        assert strategy.calls == 26

    def test_invalid_retry_budget(self, make_store, shared_groups):
        store = make_store(shared_groups)
        with pytest.raises(ConfigurationError):
            _slot_assigner(store, "no_inclusion", max_retries=0)


class TestGroupAssigner:
    """Tests for whole-group reassignment."""

    def test_two_records_get_one_of_two_permutations(self, make_store):
        groups = {
            "00010001": ["0003EB15", "0003EB16", "0003EB17", "0003EAF3"],
            "00010002": ["0003EB01", "0003EB02", "0003EB06", "0003EB07"],
        }
        seen = set()
        for seed in range(20):
            store = make_store(groups)
            records = store.list_source_records()
            originals = {
                r.form_id: store.read_group_fields(store.get_effect_group(r))
                for r in records
            }
            assigner = GroupAssigner(
                store, [store.get_effect_group(r) for r in records], random.Random(seed)
            )
            for record in records:
                assigner.assign(record)

            patched = {p.form_id: p.effects for p in store.patched_records()}
            if patched["00010001"] == originals["00010001"]:
                assert patched["00010002"] == originals["00010002"]
                seen.add("identity")
            else:
                assert patched["00010001"] == originals["00010002"]
                assert patched["00010002"] == originals["00010001"]
                seen.add("swap")
        assert seen == {"identity", "swap"}

    def test_groups_are_a_permutation(self, make_store, shared_groups):
        store = make_store(shared_groups)
        records = store.list_source_records()
        assigner = GroupAssigner(
            store, [store.get_effect_group(r) for r in records], random.Random(2)
        )
        assignments = [assigner.assign(record) for record in records]

        original = Counter(tuple(ids) for ids in shared_groups.values())
        assigned = Counter(
            tuple(e.effect_id for e in a.assigned) for a in assignments
        )
        assert assigned == original
        assert assigner.remaining == 0

    def test_exhausted_permutation_raises(self, make_store, shared_groups):
        store = make_store(shared_groups)
        records = store.list_source_records()
        assigner = GroupAssigner(store, [store.get_effect_group(records[0])], random.Random())
        assigner.assign(records[0])
        with pytest.raises(CatalogInvariantError):
            assigner.assign(records[1])
