"""Ingredient record models and YAML I/O.

Plugin dumps are YAML files holding the ingredient (INGR) records of one
plugin. A load order is a list of such files; later plugins override earlier
ones record by record.

- EffectData: one effect entry of an ingredient (MGEF link + parameters)
- IngredientRecord: one INGR record with its four effects
- PluginFile: one plugin dump
- PatchFile: the generated patch with its header flags
"""

from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_serializer, field_validator

from .effects import EFFECT_SLOTS, normalize_form_id, quantize_magnitude


class PluginLoader(yaml.SafeLoader):
    """SafeLoader without implicit ints.

    Form ids are hex, so an unquoted 00013750 or 10000000 must stay a string
    instead of becoming an octal or decimal number. Integer fields are
    converted by their pydantic models.
    """


PluginLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:int"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class EffectData(BaseModel):
    """Effect entry as stored on an ingredient."""

    effect_id: str = Field(description="Form id of the linked magic effect (EFID)")
    name: str = ""
    magnitude: Decimal = Decimal(0)
    area: int = Field(default=0, ge=0)
    duration: int = Field(default=0, ge=0)

    @field_validator("effect_id", mode="before")
    @classmethod
    def _normalize_effect_id(cls, value: Any) -> str:
        return normalize_form_id(value)

    @field_validator("magnitude", mode="before")
    @classmethod
    def _quantize_magnitude(cls, value: Any) -> Decimal:
        return quantize_magnitude(value)

    @field_serializer("magnitude")
    def _serialize_magnitude(self, value: Decimal) -> str:
        return f"{value:f}"


class IngredientRecord(BaseModel):
    """An INGR record."""

    form_id: str
    editor_id: str = ""
    name: str = ""
    effects: list[EffectData] = Field(
        min_length=EFFECT_SLOTS, max_length=EFFECT_SLOTS
    )

    @field_validator("form_id", mode="before")
    @classmethod
    def _normalize_form_id(cls, value: Any) -> str:
        return normalize_form_id(value)

    @property
    def label(self) -> str:
        """Human-readable name, falling back to editor id and form id."""
        return self.name or self.editor_id or self.form_id


class PluginFile(BaseModel):
    """Ingredient records dumped from a single plugin."""

    plugin: str
    masters: list[str] = Field(default_factory=list)
    ingredients: list[IngredientRecord] = Field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "PluginFile":
        """Load a plugin dump from a YAML file."""
        path = Path(path)

        with open(path) as f:
            data = yaml.load(f, Loader=PluginLoader)

        return cls.model_validate(data)

    def to_yaml(self, path: Path | str) -> None:
        """Save the plugin dump to a YAML file."""
        _dump_yaml(self.model_dump(mode="json"), path)


class PatchFile(BaseModel):
    """Generated patch plugin."""

    file_name: str
    flags: dict[str, bool] = Field(default_factory=dict)
    masters: list[str] = Field(default_factory=list)
    ingredients: list[IngredientRecord] = Field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "PatchFile":
        """Load a patch from a YAML file."""
        path = Path(path)

        with open(path) as f:
            data = yaml.load(f, Loader=PluginLoader)

        return cls.model_validate(data)

    def to_yaml(self, path: Path | str) -> None:
        """Save the patch to a YAML file."""
        _dump_yaml(self.model_dump(mode="json"), path)


def _dump_yaml(data: dict[str, Any], path: Path | str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(
            data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
        )
