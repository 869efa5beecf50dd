"""Sampling strategies: which catalog pick fills which effect slot.

Modes:
- groups: whole effect groups change hands (no per-slot strategy)
- dist: slot 0 takes the most frequent effect, later slots a frequency
  weighted pick; every accepted occurrence is removed from the pool
- inclusion: slot 0 dispenses a never-used effect while any remain
- no_inclusion (alias: random): plain per-slot picks, nothing removed

Outside dist mode, ignore_dist switches the plain picks between
frequency-weighted (False) and uniform over distinct effects (True).
Slot 0 never receives PARALYSIS_EFFECT_ID.
"""

from abc import ABC, abstractmethod
from enum import Enum

from ..core.models import EffectRecord, PARALYSIS_EFFECT_ID
from .catalog import EffectCatalog
from .errors import ConfigurationError


class RandomizationMode(str, Enum):
    GROUPS = "groups"
    DISTRIBUTION = "dist"
    INCLUSION = "inclusion"
    NO_INCLUSION = "no_inclusion"

    @classmethod
    def parse(cls, value: "str | RandomizationMode") -> "RandomizationMode":
        """Parse a configured mode string.

        Raises:
            ConfigurationError: If the value names no known mode.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        key = _MODE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ConfigurationError(
                f"Invalid randomization type {value!r}. Expected one of: {valid}"
            ) from None


_MODE_ALIASES = {
    "group": "groups",
    "distribution": "dist",
    "random": "no_inclusion",
    "noinclusion": "no_inclusion",
}


def excluded_for_slot(slot_index: int) -> str | None:
    """Effect id that may not fill this slot."""
    return PARALYSIS_EFFECT_ID if slot_index == 0 else None


class SamplingStrategy(ABC):
    """Picks one candidate occurrence per slot attempt.

    Strategies never mutate the catalog themselves; when consumes is True
    the assigner removes each accepted occurrence.
    """

    consumes: bool = False

    def __init__(self, catalog: EffectCatalog) -> None:
        self.catalog = catalog

    @abstractmethod
    def pick(self, slot_index: int) -> EffectRecord:
        """Return a candidate for slot_index."""


class WeightedStrategy(SamplingStrategy):
    """Frequency-weighted pick from the remaining occurrences."""

    def pick(self, slot_index: int) -> EffectRecord:
        return self.catalog.weighted_random_from_pool(excluded_for_slot(slot_index))


class UniformStrategy(SamplingStrategy):
    """Uniform pick among distinct effects (ignore_dist)."""

    def pick(self, slot_index: int) -> EffectRecord:
        return self.catalog.uniform_random_from_distinct(
            excluded_for_slot(slot_index)
        )


class DistributionStrategy(SamplingStrategy):
    """Most frequent effect first, then weighted picks; consumes the pool."""

    consumes = True

    def pick(self, slot_index: int) -> EffectRecord:
        if slot_index == 0:
            return self.catalog.most_frequent(excluded_for_slot(slot_index))
        return self.catalog.weighted_random_from_pool()


class InclusionStrategy(SamplingStrategy):
    """Slot 0 dispenses unused effects until every effect has been used once."""

    def __init__(self, catalog: EffectCatalog, fallback: SamplingStrategy) -> None:
        super().__init__(catalog)
        self.fallback = fallback

    def pick(self, slot_index: int) -> EffectRecord:
        if slot_index == 0:
            record = self.catalog.take_next_unique(excluded_for_slot(slot_index))
            if record is not None:
                return record
        return self.fallback.pick(slot_index)


def create_strategy(
    mode: RandomizationMode, catalog: EffectCatalog, ignore_dist: bool = False
) -> SamplingStrategy:
    """Build the sampling strategy for a per-slot mode.

    Raises:
        ConfigurationError: For GROUPS, which has no per-slot strategy.
    """
    plain: SamplingStrategy
    if ignore_dist:
        plain = UniformStrategy(catalog)
    else:
        plain = WeightedStrategy(catalog)

    if mode is RandomizationMode.DISTRIBUTION:
        return DistributionStrategy(catalog)
    elif mode is RandomizationMode.INCLUSION:
        return InclusionStrategy(catalog, fallback=plain)
    elif mode is RandomizationMode.NO_INCLUSION:
        return plain
    elif mode is RandomizationMode.GROUPS:
        raise ConfigurationError("Group mode assigns whole groups, not slots")
    raise ConfigurationError(f"Unhandled randomization mode: {mode!r}")
