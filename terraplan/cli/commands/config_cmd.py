"""Config command: show, change or reset persisted terraplan settings."""

from typing import Callable, NoReturn

import typer
from rich.markup import escape

from ..app import app, console
from ... import config as settings
from ...config import CLI_MODES, TerraplanConfig, get_config, reset_config


def _parse_limit(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        _fail(f"Invalid integer: {value}", ["Use 0 to disable the limit"])


def _parse_mode(value: str) -> str:
    if value not in CLI_MODES:
        _fail(f"Invalid mode: {value}", [f"Valid modes: {', '.join(CLI_MODES)}"])
    return value


# "section.field" -> parser for the raw command-line value
SETTERS: dict[str, Callable[[str], object]] = {
    "planner.max_instances": _parse_limit,
    "cli.mode": _parse_mode,
}


def _fail(message: str, hints: list[str]) -> NoReturn:
    label, _, rest = message.partition(":")
    console.print(f"[red]{label}:[/red]{escape(rest)}")
    for hint in hints:
        console.print(hint)
    raise typer.Exit(1)


def _key_hints() -> list[str]:
    return ["Available keys:", *(f"  {k}" for k in sorted(SETTERS))]


@app.command("config")
def config_command(
    action: str = typer.Argument(..., help="Action: show, set, reset"),
    key: str | None = typer.Argument(
        None, help="Setting to change, e.g. planner.max_instances"
    ),
    value: str | None = typer.Argument(None, help="New value for the setting"),
):
    """View or modify terraplan configuration.

    Examples:
        terraplan config show
        terraplan config set planner.max_instances 500
        terraplan config set cli.mode agent
        terraplan config reset
    """
    if action == "show":
        _show()
    elif action == "set":
        if not key or value is None:
            _fail("Usage: terraplan config set <key> <value>", _key_hints())
        _set(key, value)
    elif action == "reset":
        _reset()
    else:
        _fail(f"Unknown action: {action}", ["Valid actions: show, set, reset"])


def _show() -> None:
    """Print the resolved settings (file plus environment overrides)."""
    config = get_config()
    limit = config.planner.max_instances

    console.print()
    console.print("[bold]terraplan settings[/bold]")
    console.print("─" * 40)
    console.print()
    console.print("[bold cyan]Planner[/bold cyan]")
    console.print(
        f"  max_instances = {limit if limit > 0 else '[dim](unlimited)[/dim]'}"
    )
    console.print()
    console.print("[bold cyan]CLI[/bold cyan]")
    console.print(f"  mode          = {config.cli.mode}")
    console.print()
    console.print(f"[dim]Config file: {settings.CONFIG_FILE}[/dim]")


def _set(key: str, value: str) -> None:
    if key not in SETTERS:
        _fail(f"Unknown key: {key}", _key_hints())
    parsed = SETTERS[key](value)

    # Start from the file alone so env overrides are never written back
    config = TerraplanConfig.load_file()
    section, field_name = key.split(".", 1)
    setattr(getattr(config, section), field_name, parsed)
    config.save()
    reset_config()

    console.print(f"[green]✓[/green] Set {key} = {parsed}")


def _reset() -> None:
    settings.CONFIG_FILE.unlink(missing_ok=True)
    reset_config()
    console.print("[green]✓[/green] Config reset to defaults")
