"""Randomize command: shuffle ingredient effects and write the patch."""

import copy
import time
from pathlib import Path

import typer

from ...config import get_config
from ...randomizer import (
    ConfigurationError,
    RandomizationRun,
    RandomizerError,
)
from ...report import result_to_dict, save_json, write_reports
from ...store import RecordStoreError, YamlRecordStore
from ..app import app, console, get_json_mode, setup_logging
from ..utils import Output, ExitCode, format_elapsed


@app.command("randomize")
def randomize_command(
    plugins: list[Path] = typer.Argument(
        ...,
        help="Plugin dump YAML files, in load order",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Patch output path (defaults to <patch file name>.yaml)",
    ),
    mode: str | None = typer.Option(
        None,
        "--mode",
        "-m",
        help="groups, dist, inclusion or no_inclusion (alias: random)",
    ),
    ignore_dist: bool | None = typer.Option(
        None,
        "--ignore-dist/--weighted",
        help="Pick effects uniformly instead of by frequency",
    ),
    seed: int | None = typer.Option(
        None, "--seed", help="Random seed for reproducibility"
    ),
    max_retries: int | None = typer.Option(
        None, "--max-retries", min=1, help="Attempts per effect slot"
    ),
    patch_name: str | None = typer.Option(
        None, "--patch-name", help="File name recorded in the patch"
    ),
    esl: bool | None = typer.Option(
        None, "--esl/--no-esl", help="Set the ESL flag on the patch"
    ),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Directory for the effect log and summary"
    ),
    no_logs: bool = typer.Option(
        False, "--no-logs", help="Do not write the effect log and summary"
    ),
    save_result: Path | None = typer.Option(
        None, "--save-result", help="Also save the full run result as JSON"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logs"),
    debug: bool = typer.Option(False, "--debug", help="Show every assignment"),
):
    """
    Randomize the effects of every ingredient in the load order.

    EXIT CODES:
        0 = Success
        1 = Configuration error
        3 = Plugin dump not found or invalid, or output not writable
        4 = Randomization error

    Examples:
        alchemy-shuffle randomize Skyrim.esm.yaml Dawnguard.esm.yaml
        alchemy-shuffle randomize Skyrim.esm.yaml -m dist --seed 42
        alchemy-shuffle randomize Skyrim.esm.yaml -m inclusion --ignore-dist --no-esl
    """
    setup_logging(verbose=verbose, debug=debug)
    json_mode = get_json_mode()
    out = Output(console=console, json_mode=json_mode)
    start_time = time.time()

    config = copy.deepcopy(get_config())
    if mode is not None:
        config.randomizer.rand_type = mode
    if ignore_dist is not None:
        config.randomizer.ignore_dist = ignore_dist
    if seed is not None:
        config.randomizer.seed = seed
    if max_retries is not None:
        config.randomizer.max_retries = max_retries
    if patch_name is not None:
        config.output.patch_file_name = patch_name
    if esl is not None:
        config.output.set_esl = esl
    if log_dir is not None:
        config.output.log_dir = str(log_dir)
    if no_logs:
        config.output.write_logs = False

    # Load plugins
    try:
        store = YamlRecordStore.from_paths(
            plugins, patch_file_name=config.output.patch_file_name
        )
    except RecordStoreError as e:
        out.error(str(e), exit_code=ExitCode.FILE_NOT_FOUND)
        raise typer.Exit(out.finish())

    out.success(
        f"Loaded {len(store.plugins)} plugin(s)",
        plugins=[plugin.plugin for plugin in store.plugins],
    )

    # Randomize
    result = None
    failure: RandomizerError | None = None
    if not json_mode:
        from rich.progress import (
            Progress,
            SpinnerColumn,
            TextColumn,
            BarColumn,
            TaskProgressColumn,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[cyan]Randomizing ingredients...[/cyan]"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Randomizing", total=None)

            def on_progress(current: int, total: int):
                progress.update(task, completed=current, total=total)

            try:
                result = RandomizationRun.from_config(
                    store, config, on_progress=on_progress
                ).execute()
            except RandomizerError as e:
                failure = e
    else:
        try:
            result = RandomizationRun.from_config(store, config).execute()
        except RandomizerError as e:
            failure = e

    if failure is not None:
        if isinstance(failure, ConfigurationError):
            out.error(str(failure), exit_code=ExitCode.CONFIGURATION_ERROR)
        else:
            out.error(
                f"Randomization failed: {failure}",
                exit_code=ExitCode.RANDOMIZATION_ERROR,
                suggestion="Add more plugins or use a mode that does not consume effects",
            )
        raise typer.Exit(out.finish())

    if result.ignore_dist and result.mode in ("groups", "dist"):
        out.warning(
            f"--ignore-dist has no effect in {result.mode} mode",
            suggestion="Use inclusion or no_inclusion for uniform picks",
        )

    # Write patch and reports
    patch_path = output or Path(f"{config.output.patch_file_name}.yaml")
    try:
        patch = store.save_patch(patch_path)
    except OSError as e:
        out.error(
            f"Failed to write patch {patch_path}: {e}",
            exit_code=ExitCode.FILE_NOT_FOUND,
        )
        raise typer.Exit(out.finish())
    out.success(
        f"Randomized {len(result.assignments)} ingredients "
        f"([bold]{result.mode}[/bold], seed {result.seed})",
        mode=result.mode,
        seed=result.seed,
        ingredient_count=len(result.assignments),
    )
    out.success(
        f"Wrote patch to {patch_path} (ESL={patch.flags.get('ESL', False)})",
        patch_path=str(patch_path),
        flags=patch.flags,
    )

    try:
        if config.output.write_logs:
            paths = write_reports(result, config.log_dir_resolved)
            out.success(
                "Wrote " + ", ".join(str(p) for p in paths),
                logs=[str(p) for p in paths],
            )

        if save_result is not None:
            save_json(result, save_result)
            out.success(
                f"Saved run result to {save_result}", result_path=str(save_result)
            )
    except OSError as e:
        out.error(
            f"Failed to write reports: {e}",
            exit_code=ExitCode.FILE_NOT_FOUND,
            suggestion=f"The patch was written to {patch_path}",
        )
        raise typer.Exit(out.finish())

    out.set_data("result", result_to_dict(result))

    if not json_mode:
        index = result.effect_index()
        names = result.effect_names()
        top = sorted(index.items(), key=lambda item: -len(item[1]))[:10]
        out.blank()
        out.table(
            "Most assigned effects",
            ["Effect", "Ingredients"],
            [[names[effect_id], str(len(recipients))] for effect_id, recipients in top],
        )

    out.text(f"[dim]Done in {format_elapsed(time.time() - start_time)}[/dim]")
    raise typer.Exit(out.finish())
