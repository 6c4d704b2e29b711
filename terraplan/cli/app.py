"""The terraplan typer app, its global options and logging setup."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="terraplan",
    help="Expand count/for_each resources and compute dependency-ordered execution plans.",
    no_args_is_help=True,
)

console = Console()

# Set from --json on every invocation
_json_flag = False


def get_json_mode() -> bool:
    """Whether --json was passed to the current invocation."""
    return _json_flag


def is_agent_mode() -> bool:
    """Whether settings ask for JSON output by default (cli.mode = agent)."""
    from ..config import get_config

    return get_config().cli.mode == "agent"


def is_json_output() -> bool:
    return get_json_mode() or is_agent_mode()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Route terraplan logs through rich; WARNING unless -v / --debug."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
    logging.getLogger("terraplan").setLevel(level)


def _print_version(value: bool) -> None:
    if not value:
        return
    from .. import __version__

    print(f"terraplan {__version__}")
    raise typer.Exit()


@app.callback()
def main_callback(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print one JSON document instead of rich text",
            is_eager=True,
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Print the terraplan version and exit",
            callback=_print_version,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show info-level logs")
    ] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Show debug-level logs")] = False,
):
    """terraplan: plan the creation order of count/for_each-expanded resources.

    Pass --json (or set cli.mode to agent) for output meant for scripts.
    """
    global _json_flag
    _json_flag = json_output
    setup_logging(verbose=verbose, debug=debug)


# Registers the commands on `app`
from .commands import (  # noqa: E402, F401
    plan,
    validate,
    graph,
    inspect,
    config_cmd,
)
