"""terraplan: resource expansion and dependency ordering for Terraform-style configurations."""

__version__ = "0.1.0"

from .core.errors import (
    PlanError,
    ConfigurationError,
    DuplicateIdentifierError,
    NotFoundError,
    InvalidCountError,
    InvalidForEachKeyError,
    ExpansionLimitExceededError,
    UnresolvedReferenceError,
    CyclicDependencyError,
)
from .core.models import (
    ResourceAddress,
    InstanceAddress,
    CountExpansion,
    ForEachExpansion,
    ResourceDeclaration,
    ResourceInstance,
    DependencyEdge,
    ExecutionPlan,
)
from .engine import (
    DeclarationStore,
    DependencyGraph,
    expand,
    expand_all,
    build_graph,
    schedule,
    build_plan,
)
from .loader import load_configuration, load_declarations

__all__ = [
    "__version__",
    # Errors
    "PlanError",
    "ConfigurationError",
    "DuplicateIdentifierError",
    "NotFoundError",
    "InvalidCountError",
    "InvalidForEachKeyError",
    "ExpansionLimitExceededError",
    "UnresolvedReferenceError",
    "CyclicDependencyError",
    # Models
    "ResourceAddress",
    "InstanceAddress",
    "CountExpansion",
    "ForEachExpansion",
    "ResourceDeclaration",
    "ResourceInstance",
    "DependencyEdge",
    "ExecutionPlan",
    # Engine
    "DeclarationStore",
    "DependencyGraph",
    "expand",
    "expand_all",
    "build_graph",
    "schedule",
    "build_plan",
    # Loading
    "load_configuration",
    "load_declarations",
]
