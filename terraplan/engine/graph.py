"""Dependency graph over resource instances.

Edges come from two sources:
- explicit: every instance of a declaration depends on every instance of
  each declaration named in its depends_on
- implicit: an instance depends on whatever its rendered attributes
  reference, either one specific instance (indexed reference) or all
  instances of the referenced declaration
"""

import logging
from typing import Iterable, Literal

from ..core.errors import UnresolvedReferenceError
from ..core.models import (
    DependencyEdge,
    InstanceAddress,
    ResourceAddress,
    ResourceDeclaration,
    ResourceInstance,
)
from ..utils import Reference, extract_references
from .expander import DEFAULT_MAX_INSTANCES, expand_all
from .store import DeclarationStore

logger = logging.getLogger(__name__)

EdgeKind = Literal["explicit", "implicit"]


class DependencyGraph:
    """Directed graph where an edge source -> target means source depends on target.

    Adding the same edge twice is a no-op. An edge recorded both explicitly
    and implicitly reports as explicit.
    """

    def __init__(self, instances: Iterable[ResourceInstance] = ()):
        self._instances: dict[InstanceAddress, ResourceInstance] = {}
        self._dependencies: dict[InstanceAddress, set[InstanceAddress]] = {}
        self._dependents: dict[InstanceAddress, set[InstanceAddress]] = {}
        self._explicit: set[tuple[InstanceAddress, InstanceAddress]] = set()
        for instance in instances:
            self.add_instance(instance)

    def add_instance(self, instance: ResourceInstance) -> None:
        address = instance.address
        self._instances[address] = instance
        self._dependencies.setdefault(address, set())
        self._dependents.setdefault(address, set())

    def add_edge(
        self,
        source: InstanceAddress,
        target: InstanceAddress,
        kind: EdgeKind = "implicit",
    ) -> None:
        for address in (source, target):
            if address not in self._instances:
                raise KeyError(f"Unknown instance: {address}")
        self._dependencies[source].add(target)
        self._dependents[target].add(source)
        if kind == "explicit":
            self._explicit.add((source, target))

    @property
    def addresses(self) -> list[InstanceAddress]:
        return list(self._instances)

    @property
    def instances(self) -> list[ResourceInstance]:
        return list(self._instances.values())

    def instance(self, address: InstanceAddress) -> ResourceInstance:
        return self._instances[address]

    def dependencies_of(self, address: InstanceAddress) -> frozenset[InstanceAddress]:
        """Instances that must be realized before `address`."""
        return frozenset(self._dependencies[address])

    def dependents_of(self, address: InstanceAddress) -> frozenset[InstanceAddress]:
        """Instances that depend on `address`."""
        return frozenset(self._dependents[address])

    def has_edge(self, source: InstanceAddress, target: InstanceAddress) -> bool:
        return target in self._dependencies.get(source, ())

    def edges(self) -> list[DependencyEdge]:
        """All edges, sorted by (source, target)."""
        result = []
        for source in sorted(self._dependencies, key=lambda a: a.sort_key):
            for target in sorted(self._dependencies[source], key=lambda a: a.sort_key):
                kind: EdgeKind = (
                    "explicit" if (source, target) in self._explicit else "implicit"
                )
                result.append(DependencyEdge(source=source, target=target, kind=kind))
        return result

    def __contains__(self, address: object) -> bool:
        return address in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def to_dot(self) -> str:
        """Render the graph in Graphviz DOT format.

        Arrows point from an instance to what it depends on, matching
        `terraform graph`. Explicit edges are drawn dashed.
        """
        lines = ["digraph {", "  rankdir = \"RL\";"]
        for address in sorted(self._instances, key=lambda a: a.sort_key):
            lines.append(f"  {_dot_id(address)};")
        for edge in self.edges():
            style = " [style=dashed]" if edge.kind == "explicit" else ""
            lines.append(
                f"  {_dot_id(edge.source)} -> {_dot_id(edge.target)}{style};"
            )
        lines.append("}")
        return "\n".join(lines)


def _dot_id(address: InstanceAddress) -> str:
    text = str(address).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


# =============================================================================
# Building
# =============================================================================


def _resolve(
    ref: Reference,
    declaring: ResourceDeclaration,
    store: DeclarationStore,
    expansions: dict[ResourceAddress, list[ResourceInstance]],
) -> list[InstanceAddress]:
    """Resolve a reference to the instance addresses it designates."""
    target = ResourceAddress(type=ref.type, name=ref.name)
    if target not in store:
        raise UnresolvedReferenceError(
            declaring.address, str(ref), "no such resource is declared"
        )

    instances = [inst.address for inst in expansions[target]]
    if ref.key is None:
        return instances

    wanted = InstanceAddress(resource=target, key=ref.key)
    if wanted in instances:
        return [wanted]

    strategy = store.get(target).strategy
    if strategy == "none":
        reason = f"{target} does not use count or for_each and cannot be indexed"
    elif strategy == "count" and isinstance(ref.key, str):
        reason = f"{target} uses count; index must be an integer"
    elif strategy == "count":
        reason = f"index {ref.key} out of range for count {len(instances)}"
    elif isinstance(ref.key, int):
        reason = f"{target} uses for_each; key must be a string"
    else:
        reason = f"key {ref.key!r} is not in for_each of {target}"
    raise UnresolvedReferenceError(declaring.address, str(ref), reason)


def build_graph(
    store: DeclarationStore,
    expansions: dict[ResourceAddress, list[ResourceInstance]] | None = None,
    max_instances: int | None = DEFAULT_MAX_INSTANCES,
) -> DependencyGraph:
    """
    Build the instance dependency graph for every declaration in the store.

    Args:
        store: Declarations to graph
        expansions: Pre-computed expansions (from expand_all); computed if omitted
        max_instances: Expansion limit used when expansions are computed here

    Returns:
        DependencyGraph containing every instance

    Raises:
        UnresolvedReferenceError: If depends_on or an attribute names an
            unknown resource, or an index/key the target does not have
    """
    if expansions is None:
        expansions = expand_all(store, max_instances)

    graph = DependencyGraph(
        inst for decl in store for inst in expansions[decl.address]
    )

    for decl in store:
        own = expansions[decl.address]

        # Explicit: cross product with every instance of each dependency
        for dep in decl.depends_on:
            if dep not in store:
                raise UnresolvedReferenceError(
                    decl.address, str(dep), "depends_on names an undeclared resource"
                )
            for inst in own:
                for target in expansions[dep]:
                    graph.add_edge(inst.address, target.address, "explicit")

        # Unrendered attributes catch unknown resources even when the
        # declaration expands to zero instances.
        for ref in extract_references(decl.attributes):
            if ResourceAddress(type=ref.type, name=ref.name) not in store:
                raise UnresolvedReferenceError(
                    decl.address, str(ref), "no such resource is declared"
                )

        # Implicit: per instance, after count.index / each.key rendering
        for inst in own:
            for ref in extract_references(inst.attributes):
                for target in _resolve(ref, decl, store, expansions):
                    graph.add_edge(inst.address, target, "implicit")

    logger.debug(
        "Built dependency graph: %d instances, %d edges",
        len(graph),
        len(graph.edges()),
    )
    return graph
