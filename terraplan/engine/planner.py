"""End-to-end planning: declarations -> instances -> graph -> execution plan."""

import logging
from typing import Iterable

from ..core.models import ExecutionPlan, ResourceDeclaration
from .expander import DEFAULT_MAX_INSTANCES, expand_all
from .graph import DependencyGraph, build_graph
from .scheduler import schedule
from .store import DeclarationStore

logger = logging.getLogger(__name__)


def _as_store(
    declarations: DeclarationStore | Iterable[ResourceDeclaration],
) -> DeclarationStore:
    if isinstance(declarations, DeclarationStore):
        return declarations
    return DeclarationStore(declarations)


def plan_graph(
    declarations: DeclarationStore | Iterable[ResourceDeclaration],
    max_instances: int | None = DEFAULT_MAX_INSTANCES,
) -> DependencyGraph:
    """Expand declarations and build their dependency graph."""
    store = _as_store(declarations)
    expansions = expand_all(store, max_instances)
    return build_graph(store, expansions)


def build_plan(
    declarations: DeclarationStore | Iterable[ResourceDeclaration],
    max_instances: int | None = DEFAULT_MAX_INSTANCES,
) -> ExecutionPlan:
    """
    Compute the execution plan for a set of declarations.

    The whole pipeline is recomputed on every call and shares no state
    between calls.

    Args:
        declarations: A DeclarationStore, or declarations to put in a new one
        max_instances: Per-declaration expansion limit; None disables it

    Returns:
        ExecutionPlan with every instance ordered after its dependencies

    Raises:
        DuplicateIdentifierError: If two declarations share an address
        InvalidCountError, InvalidForEachKeyError, ExpansionLimitExceededError:
            If a declaration cannot be expanded
        UnresolvedReferenceError: If a reference cannot be resolved
        CyclicDependencyError: If the dependencies form a cycle
    """
    graph = plan_graph(declarations, max_instances)
    plan = schedule(graph)
    logger.info(
        "Planned %d instances in %d stages", len(plan.instances), len(plan.stages)
    )
    return plan
