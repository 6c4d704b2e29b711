"""Execution ordering via Kahn's algorithm.

Among instances whose dependencies are all scheduled, the smallest by
(declaration address, index key) goes next, so identical input always
produces the identical plan.
"""

import heapq
import logging

from ..core.errors import CyclicDependencyError
from ..core.models import ExecutionPlan, InstanceAddress
from .graph import DependencyGraph

logger = logging.getLogger(__name__)


def _find_cycle(
    graph: DependencyGraph, remaining: set[InstanceAddress]
) -> list[InstanceAddress]:
    """Trace a cycle among instances Kahn's algorithm could not schedule.

    Every unscheduled instance has at least one unscheduled dependency, so
    following dependencies from any of them must revisit an instance.
    """
    node = min(remaining, key=lambda a: a.sort_key)
    path: list[InstanceAddress] = []
    position: dict[InstanceAddress, int] = {}

    while node not in position:
        position[node] = len(path)
        path.append(node)
        node = min(
            (d for d in graph.dependencies_of(node) if d in remaining),
            key=lambda a: a.sort_key,
        )

    cycle = path[position[node] :]
    pivot = cycle.index(min(cycle, key=lambda a: a.sort_key))
    cycle = cycle[pivot:] + cycle[:pivot]
    return cycle + [cycle[0]]


def schedule(graph: DependencyGraph) -> ExecutionPlan:
    """
    Compute a topological execution order for the graph.

    Returns:
        ExecutionPlan listing every instance after all of its dependencies,
        with instances grouped into stages by dependency depth

    Raises:
        CyclicDependencyError: If some instances can never be scheduled
    """
    in_degree = {addr: len(graph.dependencies_of(addr)) for addr in graph.addresses}
    ready = [(addr.sort_key, addr) for addr, n in in_degree.items() if n == 0]
    heapq.heapify(ready)

    order: list[InstanceAddress] = []
    depth: dict[InstanceAddress, int] = {}

    while ready:
        _, current = heapq.heappop(ready)
        order.append(current)
        deps = graph.dependencies_of(current)
        depth[current] = 1 + max((depth[d] for d in deps), default=-1)

        for dependent in graph.dependents_of(current):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, (dependent.sort_key, dependent))

    if len(order) != len(graph):
        remaining = set(graph.addresses) - set(order)
        cycle = _find_cycle(graph, remaining)
        logger.debug(
            "Scheduling stopped with %d unscheduled instances", len(remaining)
        )
        raise CyclicDependencyError(cycle)

    stages: list[list[InstanceAddress]] = [
        [] for _ in range(max(depth.values(), default=-1) + 1)
    ]
    for address in order:
        stages[depth[address]].append(address)

    logger.debug("Scheduled %d instances in %d stages", len(order), len(stages))
    return ExecutionPlan(
        instances=[graph.instance(a) for a in order],
        stages=stages,
    )
