"""Config command for viewing and managing alchemy-shuffle configuration."""

import typer

from ..app import app, console
from ...config import (
    get_config,
    reset_config,
    coerce_field,
    CONFIG_FILE,
    INT_FIELDS,
    BOOL_FIELDS,
)
from ...randomizer import ConfigurationError, RandomizationMode


VALID_KEYS = {
    "randomizer.rand_type",
    "randomizer.ignore_dist",
    "randomizer.max_retries",
    "randomizer.seed",
    "output.patch_file_name",
    "output.set_esl",
    "output.write_logs",
    "output.log_dir",
}


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. randomizer.rand_type, output.set_esl)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set",
    ),
):
    """View or modify alchemy-shuffle configuration.

    Examples:
        alchemy-shuffle config show
        alchemy-shuffle config set randomizer.rand_type dist
        alchemy-shuffle config set randomizer.ignore_dist true
        alchemy-shuffle config set output.set_esl false
        alchemy-shuffle config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] alchemy-shuffle config set <key> <value>")
            console.print()
            console.print("Available keys:")
            for k in sorted(VALID_KEYS):
                console.print(f"  {k}")
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _show_config():
    """Display current resolved configuration."""
    config = get_config()

    console.print()
    console.print("[bold]alchemy-shuffle Configuration[/bold]")
    console.print("─" * 40)

    console.print()
    console.print("[bold cyan]Randomizer[/bold cyan]")
    console.print(f"  rand_type    = {config.randomizer.rand_type}")
    console.print(f"  ignore_dist  = {config.randomizer.ignore_dist}")
    console.print(f"  max_retries  = {config.randomizer.max_retries}")
    seed = config.randomizer.seed
    console.print(f"  seed         = {seed if seed is not None else '[dim](random)[/dim]'}")

    console.print()
    console.print("[bold cyan]Output[/bold cyan]")
    console.print(f"  patch_file_name = {config.output.patch_file_name}")
    console.print(f"  set_esl         = {config.output.set_esl}")
    console.print(f"  write_logs      = {config.output.write_logs}")
    console.print(f"  log_dir         = {config.output.log_dir}")

    console.print()
    if CONFIG_FILE.exists():
        console.print(f"Config file: {CONFIG_FILE}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({CONFIG_FILE})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        console.print()
        console.print("Available keys:")
        for k in sorted(VALID_KEYS):
            console.print(f"  {k}")
        raise typer.Exit(1)

    config = get_config()
    zone, field_name = key.split(".", 1)
    target = config.randomizer if zone == "randomizer" else config.output

    if field_name == "rand_type":
        try:
            value = RandomizationMode.parse(value).value
        except ConfigurationError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    try:
        coerced = coerce_field(field_name, value)
    except ValueError:
        if field_name in INT_FIELDS:
            console.print(f"[red]Invalid integer value:[/red] {value}")
        elif field_name in BOOL_FIELDS:
            console.print(f"[red]Invalid boolean value:[/red] {value}")
        else:
            console.print(f"[red]Invalid value:[/red] {value}")
        raise typer.Exit(1)
    setattr(target, field_name, coerced)

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {value}")
    console.print(f"  Saved to {CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    if CONFIG_FILE.exists():
        CONFIG_FILE.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {CONFIG_FILE}")
    else:
        console.print("Config already at defaults (no config file exists)")
