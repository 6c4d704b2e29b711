"""Plan command: print the dependency-ordered execution plan."""

from pathlib import Path

import typer

from ...config import get_config
from ...core.errors import PlanError
from ...engine import build_plan
from ..app import app, console, is_json_output
from ..utils import Output, load_store


@app.command("plan")
def plan_command(
    path: Path = typer.Argument(
        ..., help="Configuration file (.yaml, .tf.json) or directory"
    ),
    destroy: bool = typer.Option(
        False, "--destroy", help="Show the destroy order (dependents first)"
    ),
    stages: bool = typer.Option(
        False, "--stages", help="Group instances into stages that can run in parallel"
    ),
):
    """
    Compute the execution plan for a configuration.

    Expands count/for_each, derives dependencies from depends_on and
    ${...} references, and orders every instance after its dependencies.

    EXIT CODES:
        0 = Success
        1 = Invalid configuration file
        3 = File not found
        4 = Invalid count / for_each
        5 = Unresolved reference
        6 = Cyclic dependency
        7 = Duplicate resource address

    EXAMPLES:
        terraplan plan network.yaml
        terraplan plan ./infra --stages
        terraplan --json plan main.tf.json --destroy
    """
    out = Output(console=console, json_mode=is_json_output())

    store = load_store(path, out)
    if store is None:
        raise typer.Exit(out.finish())

    try:
        plan = build_plan(store, max_instances=get_config().resolve_max_instances())
    except PlanError as e:
        out.plan_error(e)
        raise typer.Exit(out.finish())

    order = plan.destroy_order if destroy else plan.order
    action = "destroy" if destroy else "create"
    out.success(
        f"Planned {len(order)} instances from {len(store)} declarations",
        declaration_count=len(store),
        **plan.to_dict(),
    )
    out.blank()

    if stages:
        stage_list = list(reversed(plan.stages)) if destroy else plan.stages
        rows = [
            [str(i), str(address)]
            for i, stage in enumerate(stage_list, 1)
            for address in stage
        ]
        out.table(f"Stages ({action})", ["Stage", "Instance"], rows, key="stage_rows")
    else:
        rows = [[str(i), str(address)] for i, address in enumerate(order, 1)]
        out.table(f"Plan ({action})", ["#", "Instance"], rows, key="plan_rows")

    raise typer.Exit(out.finish())
