"""Pure utility functions for terraplan.

This module contains pure functions with ZERO dependencies on terraplan models
or other terraplan modules. These are foundational utilities that can be
imported from anywhere without circular import risk.

Modules:
- expressions: Interpolation parsing, reference extraction and rendering
- paths: Configuration file discovery
"""

from .expressions import (
    Reference,
    RESERVED_ROOTS,
    iter_strings,
    find_interpolations,
    extract_references,
    extract_references_from_expression,
    validate_interpolation_syntax,
    render_string,
    render_value,
)
from .paths import (
    CONFIG_SUFFIXES,
    is_configuration_file,
    discover_configuration_files,
)

__all__ = [
    # Expressions
    "Reference",
    "RESERVED_ROOTS",
    "iter_strings",
    "find_interpolations",
    "extract_references",
    "extract_references_from_expression",
    "validate_interpolation_syntax",
    "render_string",
    "render_value",
    # Paths
    "CONFIG_SUFFIXES",
    "is_configuration_file",
    "discover_configuration_files",
]
