"""Randomization run: build once, assign every ingredient, finalize.

Phases:
1. Build: collect the winning ingredient records, then either the shuffled
   effect catalog (per-slot modes) or the shuffled group permutation
   (group mode), plus the shuffled list of target records
2. Assign: one assigner call per target record
3. Report: the RandomizationResult handed to the log/report writers
4. Finalize: the ESL header flag on the output patch

Build raises ConfigurationError for an empty load order or an unknown mode
before anything is written.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ..core.models import AssignmentRecord, RandomizationResult
from ..store.base import RecordStore
from ..utils.callbacks import ItemProgressCallback
from .assigners import (
    DEFAULT_MAX_RETRIES,
    GroupAssigner,
    SlotAssigner,
    effect_record_from,
)
from .catalog import EffectCatalog
from .errors import ConfigurationError
from .strategies import RandomizationMode, create_strategy

if TYPE_CHECKING:
    from ..config import AlchemyShuffleConfig

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """State of one run, created by build() and threaded through the phases."""

    mode: RandomizationMode
    seed: int
    rng: random.Random
    targets: list[Any]
    assigner: SlotAssigner | GroupAssigner
    catalog: EffectCatalog | None = None
    initial_occurrences: int = 0
    assignments: list[AssignmentRecord] = field(default_factory=list)


class RandomizationRun:
    """Randomizes the effects of every ingredient in a record store.

    Args:
        store: Source of ingredient records and sink for the patch
        mode: Randomization mode (enum or configured string)
        ignore_dist: Uniform picks over distinct effects instead of
            frequency-weighted picks (per-slot modes except dist)
        max_retries: Attempts per slot before a record counts as starved
        seed: Random seed for reproducibility (None = random)
        set_esl: Value of the ESL flag set on the patch at finalize
        on_progress: Optional callback(current, total) after each record

    Example:
        store = YamlRecordStore.from_paths(["Skyrim.esm.yaml"])
        result = RandomizationRun(store, mode="dist").execute()
        store.save_patch("RandomAlchemyPatch.esp.yaml")
    """

    def __init__(
        self,
        store: RecordStore,
        mode: RandomizationMode | str = RandomizationMode.GROUPS,
        *,
        ignore_dist: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
        seed: int | None = None,
        set_esl: bool = True,
        on_progress: ItemProgressCallback | None = None,
    ):
        self.store = store
        self.mode = mode
        self.ignore_dist = ignore_dist
        self.max_retries = max_retries
        self.seed = seed
        self.set_esl = set_esl
        self.on_progress = on_progress

    @classmethod
    def from_config(
        cls,
        store: RecordStore,
        config: "AlchemyShuffleConfig",
        on_progress: ItemProgressCallback | None = None,
    ) -> "RandomizationRun":
        """Create a run from the resolved configuration."""
        return cls(
            store,
            config.randomizer.rand_type,
            ignore_dist=config.randomizer.ignore_dist,
            max_retries=config.randomizer.max_retries,
            seed=config.randomizer.seed,
            set_esl=config.output.set_esl,
            on_progress=on_progress,
        )

    def execute(self) -> RandomizationResult:
        """Run all phases once and return the result."""
        context = self.build()
        self.assign(context)
        self.finalize(context)
        return self.report(context)

    def build(self) -> RunContext:
        """Collect records and build the catalog or group permutation.

        Raises:
            ConfigurationError: If there are no records or the mode is unknown.
        """
        mode = RandomizationMode.parse(self.mode)

        sources = self.store.list_source_records()
        if not sources:
            raise ConfigurationError("Failed to load INGR records: none found")

        # Overrides of the same record resolve to one winner; patch it once.
        winners = list(
            dict.fromkeys(self.store.resolve_override(record) for record in sources)
        )

        seed = self.seed
        if seed is None:
            seed = random.randint(0, 2**31 - 1)
        rng = random.Random(seed)
        logger.info(
            "Randomizing %d ingredients (mode=%s, ignore_dist=%s, seed=%d)",
            len(winners),
            mode.value,
            self.ignore_dist,
            seed,
        )

        catalog: EffectCatalog | None = None
        initial_occurrences = 0
        assigner: SlotAssigner | GroupAssigner
        if mode is RandomizationMode.GROUPS:
            groups = [self.store.get_effect_group(record) for record in winners]
            assigner = GroupAssigner(self.store, groups, rng)
        else:
            occurrences = [
                effect_record_from(self.store, occurrence)
                for record in winners
                for occurrence in self.store.get_effect_occurrences(record)
            ]
            catalog = EffectCatalog.build(occurrences, rng)
            initial_occurrences = catalog.total
            strategy = create_strategy(mode, catalog, ignore_dist=self.ignore_dist)
            assigner = SlotAssigner(
                self.store, catalog, strategy, max_retries=self.max_retries
            )

        targets = list(winners)
        rng.shuffle(targets)

        return RunContext(
            mode=mode,
            seed=seed,
            rng=rng,
            targets=targets,
            assigner=assigner,
            catalog=catalog,
            initial_occurrences=initial_occurrences,
        )

    def assign(self, context: RunContext) -> None:
        """Assign new effects to every target, one record at a time."""
        total = len(context.targets)
        for i, record in enumerate(context.targets):
            context.assignments.append(context.assigner.assign(record))
            if self.on_progress:
                self.on_progress(i + 1, total)

    def finalize(self, context: RunContext) -> None:
        """Set the ESL flag on the output patch."""
        logger.info("Setting ESL flag to %s.", self.set_esl)
        self.store.set_output_flag("ESL", self.set_esl)

    def report(self, context: RunContext) -> RandomizationResult:
        """Package what the run did for the log and report writers."""
        meta: dict[str, Any] = {
            "record_count": len(context.assignments),
            "generated_at": datetime.now().isoformat(),
        }
        if context.catalog is not None:
            meta["initial_occurrences"] = context.initial_occurrences
            meta["remaining_occurrences"] = context.catalog.total
            meta["distinct_effects"] = len(context.catalog.occurrence_counts)
            if context.mode is RandomizationMode.INCLUSION:
                meta["unique_dispensed"] = len(context.catalog.dispensed_unique)
                meta["unique_pending"] = len(context.catalog.pending_unique)

        return RandomizationResult(
            mode=context.mode.value,
            ignore_dist=self.ignore_dist,
            seed=context.seed,
            assignments=context.assignments,
            meta=meta,
        )
