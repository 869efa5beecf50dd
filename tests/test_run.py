"""Tests for the randomization run (build -> assign -> report -> finalize)."""

from collections import Counter

import pytest

from alchemy_shuffle.config import (
    AlchemyShuffleConfig,
    OutputConfig,
    RandomizerConfig,
)
from alchemy_shuffle.core.models import PARALYSIS_EFFECT_ID, PluginFile
from alchemy_shuffle.randomizer import (
    ConfigurationError,
    GroupAssigner,
    RandomizationMode,
    RandomizationRun,
    SlotAssigner,
    StarvationError,
)
from alchemy_shuffle.store import YamlRecordStore


def _assigned_ids(result) -> dict[str, list[str]]:
    return {a.form_id: [e.effect_id for e in a.assigned] for a in result.assignments}


class TestBuild:
    """Tests for the build phase."""

    def test_empty_load_order_raises(self):
        store = YamlRecordStore([PluginFile(plugin="Empty.esp")])
        with pytest.raises(ConfigurationError, match="INGR"):
            RandomizationRun(store, "groups").execute()

    def test_unknown_mode_raises_before_writing(self, make_store, shared_groups):
        store = make_store(shared_groups)
        with pytest.raises(ConfigurationError):
            RandomizationRun(store, "chaos").execute()
        assert store.patched_records() == []
        assert store.flags == {}

    def test_group_mode_builds_permutation(self, make_store, shared_groups):
        context = RandomizationRun(make_store(shared_groups), "groups", seed=1).build()
        assert context.mode is RandomizationMode.GROUPS
        assert isinstance(context.assigner, GroupAssigner)
        assert context.catalog is None
        assert len(context.targets) == len(shared_groups)

    def test_slot_mode_builds_catalog(self, make_store, shared_groups):
        context = RandomizationRun(make_store(shared_groups), "dist", seed=1).build()
        assert isinstance(context.assigner, SlotAssigner)
        assert context.catalog.total == 24
        assert context.initial_occurrences == 24
        assert len(context.catalog.occurrence_counts) == 8

    def test_targets_are_shuffled(self, make_store, distinct_groups):
        store = make_store(distinct_groups)
        orders = {
            tuple(r.form_id for r in RandomizationRun(store, "groups", seed=s).build().targets)
            for s in range(10)
        }
        assert len(orders) > 1

    def test_overrides_resolve_to_winner(self, make_ingredient):
        base = PluginFile(
            plugin="Skyrim.esm",
            ingredients=[
                make_ingredient("00010001", ["0003EB15", "0003EB16", "0003EB17", "0003EAF3"]),
                make_ingredient("00010002", ["0003EB01", "0003EB02", "0003EB06", "0003EB07"]),
            ],
        )
        override = PluginFile(
            plugin="Mod.esp",
            masters=["Skyrim.esm"],
            ingredients=[
                make_ingredient("00010001", ["000A0001", "000A0002", "000A0003", "000A0004"]),
            ],
        )
        store = YamlRecordStore([base, override])
        context = RandomizationRun(store, "no_inclusion", seed=3).build()

        assert sorted(r.form_id for r in context.targets) == ["00010001", "00010002"]
        assert "0003EB15" not in context.catalog.occurrence_counts
        assert context.catalog.occurrence_counts["000A0001"] == 1
        assert context.catalog.total == 8


class TestRunProperties:
    """Invariants that hold for every run."""

    @pytest.mark.parametrize("mode", ["inclusion", "no_inclusion", "random"])
    @pytest.mark.parametrize("ignore_dist", [False, True])
    def test_distinct_slots_and_no_paralysis_first(
        self, make_store, shared_groups, mode, ignore_dist
    ):
        for seed in range(5):
            result = RandomizationRun(
                make_store(shared_groups), mode, ignore_dist=ignore_dist, seed=seed
            ).execute()
            assert len(result.assignments) == len(shared_groups)
            for ids in _assigned_ids(result).values():
                assert len(set(ids)) == 4
                assert ids[0] != PARALYSIS_EFFECT_ID

    def test_distribution_uses_every_occurrence_once(self, make_store, distinct_groups):
        store = make_store(distinct_groups)
        result = RandomizationRun(store, "dist", seed=4).execute()

        assert result.meta["initial_occurrences"] == 20
        assert result.meta["remaining_occurrences"] == 0
        used = Counter(
            e.effect_id for a in result.assignments for e in a.assigned
        )
        assert used == Counter(
            effect_id for ids in distinct_groups.values() for effect_id in ids
        )

    def test_distribution_over_shared_pool(self, make_store, shared_groups):
        """Dist mode with paralysis and repeated effects in the pool.

        The last records may starve once the leftovers share too few ids;
        every record assigned before that must still be valid.
        """
        completed = 0
        for seed in range(40):
            run = RandomizationRun(make_store(shared_groups), "dist", seed=seed)
            context = run.build()
            try:
                run.assign(context)
            except StarvationError:
                pass
            else:
                completed += 1
                assert context.catalog.total == 0
            for assignment in context.assignments:
                ids = [e.effect_id for e in assignment.assigned]
                assert len(set(ids)) == 4
                assert ids[0] != PARALYSIS_EFFECT_ID
            # A record that starved mid-way has consumed its accepted slots
            consumed = 24 - context.catalog.total
            assert 4 * len(context.assignments) <= consumed
            assert consumed < 4 * (len(context.assignments) + 1)
        assert completed > 0

    def test_distribution_bookkeeping_per_record(self, make_store, distinct_groups):
        run = RandomizationRun(make_store(distinct_groups), "dist", seed=6)
        context = run.build()
        for n, record in enumerate(context.targets, 1):
            context.assigner.assign(record)
            assert sum(context.catalog.occurrence_counts.values()) == 20 - 4 * n

    def test_group_mode_is_a_permutation(self, make_store, shared_groups):
        store = make_store(shared_groups)
        result = RandomizationRun(store, "groups", seed=9).execute()
        assigned = Counter(tuple(ids) for ids in _assigned_ids(result).values())
        original = Counter(tuple(ids) for ids in shared_groups.values())
        assert assigned == original
        patched = Counter(
            tuple(e.effect_id for e in p.effects) for p in store.patched_records()
        )
        assert patched == original


class TestInclusion:
    """Tests for the unique-first inclusion mode."""

    def test_five_effects_two_ingredients(self, make_store):
        """Each ingredient's first effect is a different, never-used effect."""
        groups = {
            "00010001": ["0003EB15", "0003EB16", "0003EB17", "0003EAF3"],
            "00010002": ["0003EB15", "0003EB16", "0003EB17", "0003EB01"],
        }
        for seed in range(10):
            run = RandomizationRun(make_store(groups), "inclusion", seed=seed)
            context = run.build()
            run.assign(context)

            dispensed = context.catalog.dispensed_unique
            assert len(dispensed) == 2
            assert len(set(dispensed)) == 2
            firsts = [a.assigned[0].effect_id for a in context.assignments]
            assert firsts == dispensed
            assert len(context.catalog.pending_unique) == 3

    def test_each_effect_dispensed_at_most_once(self, make_store, shared_groups):
        groups = dict(shared_groups)
        groups.update(
            {f"0003{r:04X}": ids for r, ids in enumerate(shared_groups.values())}
        )
        run = RandomizationRun(make_store(groups), "inclusion", seed=2)
        context = run.build()
        run.assign(context)

        dispensed = context.catalog.dispensed_unique
        assert len(dispensed) == len(set(dispensed))
        # 12 ingredients but only 7 non-paralysis effects to dispense
        assert set(dispensed) == set(context.catalog.occurrence_counts) - {
            PARALYSIS_EFFECT_ID
        }

    def test_meta_reports_unique_queue(self, make_store, shared_groups):
        result = RandomizationRun(make_store(shared_groups), "inclusion", seed=1).execute()
        assert result.meta["unique_dispensed"] == 6
        assert result.meta["unique_pending"] == 2


class TestRunLifecycle:
    """Tests for finalize, reproducibility and callbacks."""

    @pytest.mark.parametrize("set_esl", [True, False])
    def test_finalize_sets_esl_flag(self, make_store, shared_groups, set_esl):
        store = make_store(shared_groups)
        RandomizationRun(store, "groups", set_esl=set_esl).execute()
        assert store.flags == {"ESL": set_esl}
        assert store.build_patch().flags == {"ESL": set_esl}

    @pytest.mark.parametrize("mode", ["groups", "dist", "inclusion", "no_inclusion"])
    def test_same_seed_same_result(self, make_store, distinct_groups, mode):
        first = RandomizationRun(make_store(distinct_groups), mode, seed=42).execute()
        second = RandomizationRun(make_store(distinct_groups), mode, seed=42).execute()
        assert _assigned_ids(first) == _assigned_ids(second)
        assert first.seed == second.seed == 42

    def test_random_seed_is_recorded(self, make_store, shared_groups):
        result = RandomizationRun(make_store(shared_groups), "groups").execute()
        assert isinstance(result.seed, int)

    def test_progress_callback(self, make_store, shared_groups):
        calls = []
        RandomizationRun(
            make_store(shared_groups),
            "no_inclusion",
            seed=1,
            on_progress=lambda current, total: calls.append((current, total)),
        ).execute()
        assert calls == [(i, 6) for i in range(1, 7)]

    def test_starvation_aborts_run(self, make_store):
        groups = {
            "00010001": ["0003EB15", "0003EB16", "0003EB17", "0003EB15"],
            "00010002": ["0003EB16", "0003EB17", "0003EB15", "0003EB16"],
        }
        with pytest.raises(StarvationError):
            RandomizationRun(make_store(groups), "no_inclusion", seed=1).execute()

    def test_from_config(self, make_store, shared_groups):
        config = AlchemyShuffleConfig(
            randomizer=RandomizerConfig(rand_type="random", ignore_dist=True, seed=5),
            output=OutputConfig(set_esl=False),
        )
        store = make_store(shared_groups)
        result = RandomizationRun.from_config(store, config).execute()
        assert result.mode == "no_inclusion"
        assert result.ignore_dist is True
        assert result.seed == 5
        assert store.flags == {"ESL": False}

    def test_effect_index(self, make_store, shared_groups):
        result = RandomizationRun(make_store(shared_groups), "groups", seed=3).execute()
        index = result.effect_index()
        for effect_id, names in index.items():
            assert names == sorted(names)
            for assignment in result.assignments:
                has_effect = any(e.effect_id == effect_id for e in assignment.assigned)
                assert has_effect == (assignment.record_name in names)
