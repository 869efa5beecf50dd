"""Effect occurrence view used by the randomizer.

An EffectRecord is the normalized, read-only view of one effect attached to
one ingredient. The randomizer moves these around; the record store owns the
underlying data behind `source_handle`.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any


# Every ingredient carries exactly four effects.
EFFECT_SLOTS = 4

# Paralysis (MGEF 00073F30) may never be an ingredient's first effect
# (gameplay balance rule, applies to slot 0 only).
PARALYSIS_EFFECT_ID = "00073F30"

MAGNITUDE_PRECISION = 6
_MAGNITUDE_QUANTUM = Decimal(1).scaleb(-MAGNITUDE_PRECISION)


def normalize_form_id(value: Any) -> str:
    """Normalize a form id to 8 uppercase hex digits.

    Examples:
        "73f30" -> "00073F30"
        0x73F30 -> "00073F30"
        "0x00073F30" -> "00073F30"

    Raises:
        ValueError: If the value is not a valid hex form id.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid form id: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if text.lower().startswith("0x"):
            text = text[2:]
        try:
            number = int(text, 16)
        except ValueError:
            raise ValueError(f"Invalid form id: {value!r}") from None
    if number < 0 or number > 0xFFFFFFFF:
        raise ValueError(f"Form id out of range: {value!r}")
    return f"{number:08X}"


def quantize_magnitude(value: Any) -> Decimal:
    """Convert a magnitude to a Decimal with MAGNITUDE_PRECISION places."""
    if isinstance(value, Decimal):
        number = value
    else:
        # str() first so floats like 0.1 keep their shortest repr
        number = Decimal(str(value))
    return number.quantize(_MAGNITUDE_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class EffectRecord:
    """One concrete effect occurrence harvested from an ingredient."""

    source_handle: Any = field(compare=False, repr=False)
    linked_effect_id: str
    display_name: str
    magnitude: Decimal
    area: int
    duration: int

    def is_same_effect(self, other: "EffectRecord") -> bool:
        """Two occurrences are the same effect when they link the same MGEF."""
        return self.linked_effect_id == other.linked_effect_id
