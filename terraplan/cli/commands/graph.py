"""Graph command: emit the instance dependency graph as Graphviz DOT."""

from pathlib import Path

import typer

from ...config import get_config
from ...core.errors import PlanError
from ...engine import plan_graph
from ..app import app, console, is_json_output
from ..utils import Output, load_store


@app.command("graph")
def graph_command(
    path: Path = typer.Argument(
        ..., help="Configuration file (.yaml, .tf.json) or directory"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write DOT to this file instead of stdout"
    ),
):
    """
    Print the instance dependency graph in DOT format.

    Pipe into Graphviz to render, e.g. `terraplan graph infra | dot -Tsvg > graph.svg`.
    """
    out = Output(console=console, json_mode=is_json_output())

    store = load_store(path, out)
    if store is None:
        raise typer.Exit(out.finish())

    try:
        graph = plan_graph(store, max_instances=get_config().resolve_max_instances())
    except PlanError as e:
        out.plan_error(e)
        raise typer.Exit(out.finish())

    if out.json_mode:
        out.set_data(
            "nodes", [str(a) for a in sorted(graph.addresses, key=lambda a: a.sort_key)]
        )
        out.set_data(
            "edges",
            [
                {"from": str(e.source), "to": str(e.target), "kind": e.kind}
                for e in graph.edges()
            ],
        )
        raise typer.Exit(out.finish())

    dot = graph.to_dot()
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(dot + "\n")
        out.success(f"Wrote graph to {output}")
    else:
        # Plain print keeps DOT free of rich markup/wrapping
        print(dot)

    raise typer.Exit(out.finish())
