"""Expansion of declarations into concrete instances.

    resource "aws_instance" "web" { count = 3 }

expands into aws_instance.web[0], aws_instance.web[1], aws_instance.web[2];

    resource "aws_s3_bucket" "env" { for_each = {prod = ..., dev = ...} }

expands into aws_s3_bucket.env["dev"], aws_s3_bucket.env["prod"] (sorted by
key). Each instance gets its own copy of the attributes with count.index,
each.key and each.value rendered.
"""

import copy
import logging
from typing import Any

from ..core.errors import (
    ExpansionLimitExceededError,
    InvalidCountError,
    InvalidForEachKeyError,
)
from ..core.models import (
    CountExpansion,
    ForEachExpansion,
    InstanceAddress,
    ResourceAddress,
    ResourceDeclaration,
    ResourceInstance,
)
from ..utils import render_value
from .store import DeclarationStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSTANCES = 10_000


def _check_limit(
    declaration: ResourceDeclaration, count: int, max_instances: int | None
) -> None:
    if max_instances is not None and count > max_instances:
        raise ExpansionLimitExceededError(declaration.address, count, max_instances)


def _for_each_items(
    address: ResourceAddress, expansion: ForEachExpansion
) -> list[tuple[str, Any]]:
    """Validate for_each and return (key, value) pairs sorted by key."""
    mapping = expansion.for_each

    if isinstance(mapping, list):
        items = [(item, item) for item in mapping]
    else:
        items = list(mapping.items())

    if not items:
        raise InvalidForEachKeyError(address, "for_each is empty")

    bad = [k for k, _ in items if not isinstance(k, str)]
    if bad:
        raise InvalidForEachKeyError(
            address,
            f"keys must be strings, got {', '.join(repr(k) for k in bad)}",
        )

    seen: set[str] = set()
    duplicates: set[str] = set()
    for key, _ in items:
        if key in seen:
            duplicates.add(key)
        seen.add(key)
    if duplicates:
        raise InvalidForEachKeyError(
            address,
            f"duplicate keys: {', '.join(sorted(duplicates))}",
        )

    return sorted(items, key=lambda kv: kv[0])


def expand(
    declaration: ResourceDeclaration,
    max_instances: int | None = DEFAULT_MAX_INSTANCES,
) -> list[ResourceInstance]:
    """
    Expand a declaration into its instances.

    Args:
        declaration: The declaration to expand
        max_instances: Largest allowed expansion; None disables the check

    Returns:
        Instances in key order: one unkeyed instance for no strategy,
        indexes 0..n-1 for count, sorted keys for for_each

    Raises:
        InvalidCountError: If count is negative or not an integer
        InvalidForEachKeyError: If for_each is empty or keys are not unique strings
        ExpansionLimitExceededError: If the expansion exceeds max_instances
    """
    address = declaration.address
    expansion = declaration.expansion

    if expansion is None:
        return [
            ResourceInstance(
                address=InstanceAddress(resource=address),
                attributes=render_value(declaration.attributes, {}),
            )
        ]

    if isinstance(expansion, CountExpansion):
        count = expansion.count
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidCountError(address, count)
        _check_limit(declaration, count, max_instances)
        if count == 0:
            logger.info("Resource %s has count=0, no instances", address)
        return [
            ResourceInstance(
                address=InstanceAddress(resource=address, key=index),
                attributes=render_value(declaration.attributes, {"count.index": index}),
            )
            for index in range(count)
        ]

    items = _for_each_items(address, expansion)
    _check_limit(declaration, len(items), max_instances)
    return [
        ResourceInstance(
            address=InstanceAddress(resource=address, key=key),
            each_value=copy.deepcopy(value),
            attributes=render_value(
                declaration.attributes, {"each.key": key, "each.value": value}
            ),
        )
        for key, value in items
    ]


def expand_all(
    store: DeclarationStore,
    max_instances: int | None = DEFAULT_MAX_INSTANCES,
) -> dict[ResourceAddress, list[ResourceInstance]]:
    """Expand every declaration in the store, keyed by declaration address."""
    expansions = {decl.address: expand(decl, max_instances) for decl in store}
    logger.debug(
        "Expanded %d declarations into %d instances",
        len(expansions),
        sum(len(v) for v in expansions.values()),
    )
    return expansions
