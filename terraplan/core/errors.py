"""Planning errors.

Every failure the engine can report is a PlanError carrying the address of
the declaration it originated from, so callers can surface it verbatim.
"""

from .models import InstanceAddress, ResourceAddress


class PlanError(Exception):
    """Base class for all terraplan errors."""

    def __init__(self, message: str, declaration: ResourceAddress | None = None):
        self.declaration = declaration
        super().__init__(message)


class ConfigurationError(PlanError):
    """Raised when a configuration file cannot be read or fails validation."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration {path}: {reason}")


class DuplicateIdentifierError(PlanError):
    """Raised when a declaration address is added to a store twice."""

    def __init__(self, address: ResourceAddress):
        super().__init__(f"Duplicate resource declaration: {address}", address)


class NotFoundError(PlanError):
    """Raised when a declaration address is not in the store."""

    def __init__(self, address: ResourceAddress | str):
        self.address = str(address)
        super().__init__(f"Resource declaration not found: {address}")


class InvalidCountError(PlanError):
    """Raised when count is negative or not an integer."""

    def __init__(self, declaration: ResourceAddress, count: object):
        self.count = count
        super().__init__(
            f"{declaration}: count must be a non-negative integer, got {count!r}",
            declaration,
        )


class InvalidForEachKeyError(PlanError):
    """Raised when for_each is empty or its keys are not unique strings."""

    def __init__(self, declaration: ResourceAddress, reason: str):
        self.reason = reason
        super().__init__(f"{declaration}: invalid for_each: {reason}", declaration)


class ExpansionLimitExceededError(PlanError):
    """Raised when a declaration expands into more instances than allowed."""

    def __init__(self, declaration: ResourceAddress, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"{declaration}: expansion into {count} instances exceeds limit {limit}",
            declaration,
        )


class UnresolvedReferenceError(PlanError):
    """Raised when a reference names an unknown resource, index or key."""

    def __init__(self, declaration: ResourceAddress, reference: str, reason: str):
        self.reference = reference
        self.reason = reason
        super().__init__(
            f"{declaration}: unresolved reference {reference}: {reason}", declaration
        )


class CyclicDependencyError(PlanError):
    """Raised when the instance graph contains a cycle.

    `cycle` follows depends-on edges and starts and ends on the same instance,
    e.g. [a, b, a] for a -> b -> a.
    """

    def __init__(self, cycle: list[InstanceAddress]):
        self.cycle = cycle
        trace = " -> ".join(str(a) for a in cycle)
        super().__init__(f"Cyclic dependency: {trace}", cycle[0].resource)
