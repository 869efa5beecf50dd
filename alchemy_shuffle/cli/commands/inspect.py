"""Inspect command: show the effect pool of a load order."""

import random
from pathlib import Path

import typer

from ...core.models import PARALYSIS_EFFECT_ID
from ...randomizer import EffectCatalog
from ...randomizer.assigners import effect_record_from
from ...store import RecordStoreError, YamlRecordStore
from ..app import app, console, get_json_mode
from ..utils import Output, ExitCode


@app.command("inspect")
def inspect_command(
    plugins: list[Path] = typer.Argument(
        ...,
        help="Plugin dump YAML files, in load order",
    ),
    top: int = typer.Option(
        20, "--top", "-n", min=1, help="Number of effects to list"
    ),
):
    """
    Show how often each effect occurs across the winning ingredient records.

    This is the pool every per-slot mode draws from.

    Examples:
        alchemy-shuffle inspect Skyrim.esm.yaml
        alchemy-shuffle --json inspect Skyrim.esm.yaml Dawnguard.esm.yaml -n 100
    """
    out = Output(console=console, json_mode=get_json_mode())

    try:
        store = YamlRecordStore.from_paths(plugins)
    except RecordStoreError as e:
        out.error(str(e), exit_code=ExitCode.FILE_NOT_FOUND)
        raise typer.Exit(out.finish())

    winners = list(
        dict.fromkeys(
            store.resolve_override(record) for record in store.list_source_records()
        )
    )
    if not winners:
        out.error("No ingredient records found", exit_code=ExitCode.CONFIGURATION_ERROR)
        raise typer.Exit(out.finish())

    catalog = EffectCatalog(
        (
            effect_record_from(store, occurrence)
            for record in winners
            for occurrence in store.get_effect_occurrences(record)
        ),
        random.Random(),
    )
    rows = catalog.frequency_table()

    out.success(
        f"{len(winners)} ingredients, {catalog.total} effect occurrences, "
        f"{len(rows)} distinct effects",
        ingredient_count=len(winners),
        occurrence_count=catalog.total,
        distinct_effects=len(rows),
    )
    out.blank()
    out.table(
        "Effect frequency",
        ["Effect", "Form ID", "Count"],
        [
            [
                name + (" (never first)" if effect_id == PARALYSIS_EFFECT_ID else ""),
                effect_id,
                str(count),
            ]
            for effect_id, name, count in rows[:top]
        ],
        data_key="effects",
    )
    raise typer.Exit(out.finish())
