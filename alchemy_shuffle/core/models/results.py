"""Run result models handed to the log and report writers."""

from collections import defaultdict
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator

from .effects import EffectRecord, quantize_magnitude


class EffectSummary(BaseModel):
    """Name/magnitude/area/duration of one effect slot, for reporting."""

    effect_id: str
    name: str
    magnitude: Decimal
    area: int
    duration: int

    @field_validator("magnitude", mode="before")
    @classmethod
    def _quantize_magnitude(cls, value: Any) -> Decimal:
        return quantize_magnitude(value)

    @field_serializer("magnitude")
    def _serialize_magnitude(self, value: Decimal) -> str:
        return f"{value:f}"

    @classmethod
    def from_record(cls, record: EffectRecord) -> "EffectSummary":
        return cls(
            effect_id=record.linked_effect_id,
            name=record.display_name,
            magnitude=record.magnitude,
            area=record.area,
            duration=record.duration,
        )


class AssignmentRecord(BaseModel):
    """Original and newly assigned effects of one ingredient, in slot order."""

    form_id: str
    record_name: str
    original: list[EffectSummary]
    assigned: list[EffectSummary]


class RandomizationResult(BaseModel):
    """Everything a run exposes to its collaborators."""

    mode: str
    ignore_dist: bool = False
    seed: int
    assignments: list[AssignmentRecord] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)

    def effect_index(self) -> dict[str, list[str]]:
        """Map each assigned effect id to the sorted names that received it."""
        index: dict[str, set[str]] = defaultdict(set)
        for assignment in self.assignments:
            for effect in assignment.assigned:
                index[effect.effect_id].add(assignment.record_name)
        return {effect_id: sorted(names) for effect_id, names in index.items()}

    def effect_names(self) -> dict[str, str]:
        """Map each assigned effect id to its display name."""
        names: dict[str, str] = {}
        for assignment in self.assignments:
            for effect in assignment.assigned:
                names.setdefault(effect.effect_id, effect.name or effect.effect_id)
        return names
