"""Shared builders for ingredient records and stores."""

import pytest

from alchemy_shuffle.core.models import (
    PARALYSIS_EFFECT_ID,
    EffectData,
    IngredientRecord,
    PluginFile,
)
from alchemy_shuffle.store import YamlRecordStore


EFFECT_NAMES = {
    PARALYSIS_EFFECT_ID: "Paralysis",
    "0003EB15": "Restore Health",
    "0003EB16": "Restore Magicka",
    "0003EB17": "Restore Stamina",
    "0003EAF3": "Fortify Health",
    "0003EB01": "Damage Magicka",
    "0003EB02": "Damage Stamina",
    "0003EB06": "Fortify Sneak",
    "0003EB07": "Fortify Smithing",
}


def effect_id(n: int) -> str:
    """Synthetic effect form id."""
    return f"000A{n:04X}"


@pytest.fixture
def make_ingredient():
    """Factory: IngredientRecord with four effects and unique parameters."""
    counter = {"n": 0}

    def _make(form_id: str, effect_ids: list[str], name: str | None = None):
        effects = []
        for slot, eid in enumerate(effect_ids):
            counter["n"] += 1
            effects.append(
                EffectData(
                    effect_id=eid,
                    name=EFFECT_NAMES.get(eid, f"Effect {eid}"),
                    magnitude=counter["n"] * 0.25,
                    area=slot,
                    duration=counter["n"],
                )
            )
        return IngredientRecord(
            form_id=form_id,
            editor_id=f"Ingr{form_id}",
            name=name or f"Ingredient {form_id}",
            effects=effects,
        )

    return _make


@pytest.fixture
def make_store(make_ingredient):
    """Factory: single-plugin YamlRecordStore from {form_id: [effect ids]}."""

    def _make(groups: dict[str, list[str]], plugin: str = "Test.esp"):
        ingredients = [
            make_ingredient(form_id, effect_ids)
            for form_id, effect_ids in groups.items()
        ]
        return YamlRecordStore([PluginFile(plugin=plugin, ingredients=ingredients)])

    return _make


@pytest.fixture
def distinct_groups():
    """Five ingredients whose twenty effects are all different."""
    return {
        f"0001{r:04X}": [effect_id(r * 4 + s) for s in range(4)] for r in range(5)
    }


@pytest.fixture
def shared_groups():
    """Six ingredients sharing eight effects, paralysis among them."""
    pool = [PARALYSIS_EFFECT_ID, "0003EB15", "0003EB16", "0003EB17",
            "0003EAF3", "0003EB01", "0003EB02", "0003EB06"]
    return {
        f"0002{r:04X}": [pool[(r + s * 2) % len(pool)] for s in range(4)]
        for r in range(6)
    }
