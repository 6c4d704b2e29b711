"""Resource expansion and dependency ordering engine.

Pipeline:
    store = DeclarationStore(declarations)
    expansions = expand_all(store)          # count / for_each -> instances
    graph = build_graph(store, expansions)  # depends_on + references -> edges
    plan = schedule(graph)                  # Kahn's algorithm -> ExecutionPlan

or simply build_plan(declarations).
"""

from .store import DeclarationStore
from .expander import DEFAULT_MAX_INSTANCES, expand, expand_all
from .graph import DependencyGraph, build_graph
from .scheduler import schedule
from .planner import build_plan, plan_graph

__all__ = [
    "DeclarationStore",
    "DEFAULT_MAX_INSTANCES",
    "expand",
    "expand_all",
    "DependencyGraph",
    "build_graph",
    "schedule",
    "build_plan",
    "plan_graph",
]
