"""Inspect command: show how one declaration expands."""

import json
from pathlib import Path

import typer

from ...config import get_config
from ...core.errors import PlanError
from ...engine import expand
from ..app import app, console, is_json_output
from ..utils import Output, load_store


@app.command("inspect")
def inspect_command(
    path: Path = typer.Argument(
        ..., help="Configuration file (.yaml, .tf.json) or directory"
    ),
    address: str = typer.Argument(..., help="Resource address, e.g. aws_instance.web"),
):
    """
    Show a declaration's expansion: its instances and rendered attributes.

    EXAMPLES:
        terraplan inspect infra aws_subnet.private
    """
    out = Output(console=console, json_mode=is_json_output())

    store = load_store(path, out)
    if store is None:
        raise typer.Exit(out.finish())

    try:
        decl = store.get(address)
        instances = expand(decl, max_instances=get_config().resolve_max_instances())
    except PlanError as e:
        out.plan_error(e)
        raise typer.Exit(out.finish())

    out.success(
        f"{decl.address}: {decl.strategy} expansion, {len(instances)} instance(s)",
        address=str(decl.address),
        strategy=decl.strategy,
        depends_on=[str(a) for a in decl.depends_on],
        instances=[
            {"address": str(inst.address), "attributes": inst.attributes}
            for inst in instances
        ],
    )
    if decl.depends_on:
        out.note(f"  depends_on: {', '.join(str(a) for a in decl.depends_on)}")

    rows = [
        [str(inst.address), json.dumps(inst.attributes, sort_keys=True, default=str)]
        for inst in instances
    ]
    if not out.json_mode:
        out.table("Instances", ["Instance", "Attributes"], rows, key="instance_rows")

    raise typer.Exit(out.finish())
