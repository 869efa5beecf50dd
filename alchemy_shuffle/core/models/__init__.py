"""Models for alchemy-shuffle, organized by domain.

- effects.py: EffectRecord and the effect-slot constants
- ingredient.py: ingredient records, plugin dumps and the patch file
- results.py: per-record assignments and the run result
"""

from .effects import (
    EFFECT_SLOTS,
    PARALYSIS_EFFECT_ID,
    MAGNITUDE_PRECISION,
    EffectRecord,
    normalize_form_id,
    quantize_magnitude,
)
from .ingredient import (
    EffectData,
    IngredientRecord,
    PluginFile,
    PatchFile,
)
from .results import (
    EffectSummary,
    AssignmentRecord,
    RandomizationResult,
)

__all__ = [
    "EFFECT_SLOTS",
    "PARALYSIS_EFFECT_ID",
    "MAGNITUDE_PRECISION",
    "EffectRecord",
    "normalize_form_id",
    "quantize_magnitude",
    "EffectData",
    "IngredientRecord",
    "PluginFile",
    "PatchFile",
    "EffectSummary",
    "AssignmentRecord",
    "RandomizationResult",
]
