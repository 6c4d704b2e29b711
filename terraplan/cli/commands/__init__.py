"""CLI commands for terraplan."""

from . import (
    plan,
    validate,
    graph,
    inspect,
    config_cmd,
)

__all__ = [
    "plan",
    "validate",
    "graph",
    "inspect",
    "config_cmd",
]
