"""alchemy-shuffle: randomize the effects of alchemy ingredients.

Quick start:
    from alchemy_shuffle import RandomizationRun, YamlRecordStore

    store = YamlRecordStore.from_paths(["Skyrim.esm.yaml"])
    result = RandomizationRun(store, mode="inclusion", seed=7).execute()
    store.save_patch("RandomAlchemyPatch.esp.yaml")
"""

__version__ = "0.1.0"

from .config import AlchemyShuffleConfig, get_config, configure
from .randomizer import RandomizationMode, RandomizationRun, RandomizerError
from .store import RecordStore, YamlRecordStore

__all__ = [
    "__version__",
    "AlchemyShuffleConfig",
    "get_config",
    "configure",
    "RandomizationMode",
    "RandomizationRun",
    "RandomizerError",
    "RecordStore",
    "YamlRecordStore",
]
