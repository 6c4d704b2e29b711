"""Pydantic models for terraplan.

- resource.py: addresses, expansion strategies, declarations, instances,
  dependency edges and execution plans
"""

from .resource import (
    # Addresses
    ResourceAddress,
    InstanceAddress,
    # Expansion
    CountExpansion,
    ForEachExpansion,
    Expansion,
    # Declarations
    ResourceDeclaration,
    ConfigurationSpec,
    # Graph / plan
    ResourceInstance,
    DependencyEdge,
    ExecutionPlan,
)

__all__ = [
    "ResourceAddress",
    "InstanceAddress",
    "CountExpansion",
    "ForEachExpansion",
    "Expansion",
    "ResourceDeclaration",
    "ConfigurationSpec",
    "ResourceInstance",
    "DependencyEdge",
    "ExecutionPlan",
]
