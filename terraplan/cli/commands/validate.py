"""Validate command for terraplan configurations."""

from pathlib import Path

import typer

from ...config import get_config
from ...core.errors import PlanError
from ...engine import build_graph, expand_all, schedule
from ...utils import iter_strings, validate_interpolation_syntax
from ..app import app, console, is_json_output
from ..utils import ExitCode, Output, load_store


@app.command("validate")
def validate_command(
    path: Path = typer.Argument(
        ..., help="Configuration file (.yaml, .tf.json) or directory"
    ),
    strict: bool = typer.Option(False, "--strict", help="Treat warnings as errors"),
):
    """
    Validate a configuration without printing the plan.

    Runs every planning stage (load, expand, graph, schedule) and reports
    the first error, plus warnings for malformed interpolations.

    EXIT CODES:
        0 = Success (valid configuration)
        1 = Invalid configuration file (or warnings with --strict)
        3 = File not found
        4 = Invalid count / for_each
        5 = Unresolved reference
        6 = Cyclic dependency
        7 = Duplicate resource address

    EXAMPLES:
        terraplan validate network.yaml
        terraplan validate ./infra --strict
    """
    out = Output(console=console, json_mode=is_json_output())

    store = load_store(path, out)
    if store is None:
        raise typer.Exit(out.finish())

    warning_count = 0
    for decl in store:
        for text in iter_strings(decl.attributes):
            problem = validate_interpolation_syntax(text)
            if problem:
                warning_count += 1
                out.warning(
                    f"{decl.address}: {problem} in {text!r}",
                    resource=str(decl.address),
                    suggestion="Close the interpolation with '}'",
                )

    try:
        expansions = expand_all(
            store, max_instances=get_config().resolve_max_instances()
        )
        graph = build_graph(store, expansions)
        schedule(graph)
    except PlanError as e:
        out.plan_error(e)
        raise typer.Exit(out.finish())

    if strict and warning_count:
        out.error(
            f"{warning_count} warning(s) treated as errors (--strict)",
            exit_code=ExitCode.VALIDATION_ERROR,
        )
        raise typer.Exit(out.finish())

    edges = graph.edges()
    explicit = sum(1 for e in edges if e.kind == "explicit")
    out.success(
        f"Configuration is valid: {len(store)} declarations, "
        f"{len(graph)} instances, {len(edges)} dependencies",
        valid=True,
        declaration_count=len(store),
        instance_count=len(graph),
        edge_count=len(edges),
        explicit_edge_count=explicit,
        implicit_edge_count=len(edges) - explicit,
    )
    raise typer.Exit(out.finish())
