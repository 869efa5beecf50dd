"""Effect sampling and assignment engine."""

from .assigners import DEFAULT_MAX_RETRIES, GroupAssigner, SlotAssigner
from .catalog import EffectCatalog
from .errors import (
    CatalogInvariantError,
    ConfigurationError,
    RandomizerError,
    StarvationError,
)
from .run import RandomizationRun, RunContext
from .strategies import (
    DistributionStrategy,
    InclusionStrategy,
    RandomizationMode,
    SamplingStrategy,
    UniformStrategy,
    WeightedStrategy,
    create_strategy,
)

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "GroupAssigner",
    "SlotAssigner",
    "EffectCatalog",
    "CatalogInvariantError",
    "ConfigurationError",
    "RandomizerError",
    "StarvationError",
    "RandomizationRun",
    "RunContext",
    "DistributionStrategy",
    "InclusionStrategy",
    "RandomizationMode",
    "SamplingStrategy",
    "UniformStrategy",
    "WeightedStrategy",
    "create_strategy",
]
