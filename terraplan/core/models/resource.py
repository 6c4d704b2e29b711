"""Resource declaration, instance and plan models for terraplan.

A ResourceDeclaration is a single authored resource definition. Expanding it
(via its count / for_each strategy) yields ResourceInstances, which are the
nodes of the dependency graph and the entries of an ExecutionPlan.

This module contains:
- Addresses: ResourceAddress, InstanceAddress
- Expansion strategies: CountExpansion, ForEachExpansion
- Declarations: ResourceDeclaration, ConfigurationSpec
- Graph/plan types: ResourceInstance, DependencyEdge, ExecutionPlan
"""

import json
import re
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    field_validator,
    model_validator,
)


IDENTIFIER_PATTERN = r"[A-Za-z_][A-Za-z0-9_-]*"

_IDENTIFIER_RE = re.compile(rf"^{IDENTIFIER_PATTERN}$")
_ADDRESS_RE = re.compile(rf"^({IDENTIFIER_PATTERN})\.({IDENTIFIER_PATTERN})$")


# =============================================================================
# Addresses
# =============================================================================


class ResourceAddress(BaseModel):
    """Identifier of a declaration: resource type plus local name.

    Accepts the "type.name" string form wherever a ResourceAddress is
    expected (e.g. in depends_on lists).
    """

    model_config = ConfigDict(frozen=True)

    type: str
    name: str

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if not isinstance(data, str):
            return data
        text = data.strip()
        # Older configs wrap depends_on entries in an interpolation
        if text.startswith("${") and text.endswith("}"):
            text = text[2:-1].strip()
        match = _ADDRESS_RE.match(text)
        if not match:
            raise ValueError(
                f"Invalid resource address: {data!r}. "
                f"Expected format: 'type.name' (e.g., 'aws_instance.web')"
            )
        return {"type": match.group(1), "name": match.group(2)}

    @classmethod
    def parse(cls, value: "str | ResourceAddress") -> "ResourceAddress":
        """Parse a "type.name" string (address objects pass through).

        Raises:
            ValueError: If the string is not a valid address.
        """
        if isinstance(value, ResourceAddress):
            return value
        return cls.model_validate(value)

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.type, self.name)

    def __str__(self) -> str:
        return f"{self.type}.{self.name}"


class InstanceAddress(BaseModel):
    """Identity of one expanded instance.

    key is an int for count resources, a str for for_each resources and
    None for resources without an expansion strategy.
    """

    model_config = ConfigDict(frozen=True)

    resource: ResourceAddress
    key: int | str | None = None

    @property
    def sort_key(self) -> tuple:
        """Ordering used for deterministic tie-breaks.

        Integer keys compare numerically, so web[2] sorts before web[10].
        """
        if self.key is None:
            rank: tuple = (0, 0, "")
        elif isinstance(self.key, int):
            rank = (1, self.key, "")
        else:
            rank = (2, 0, self.key)
        return (*self.resource.sort_key, *rank)

    def __str__(self) -> str:
        if self.key is None:
            return str(self.resource)
        if isinstance(self.key, int):
            return f"{self.resource}[{self.key}]"
        return f"{self.resource}[{json.dumps(self.key)}]"


# =============================================================================
# Expansion strategies
# =============================================================================


class CountExpansion(BaseModel):
    """`count = n`: n instances indexed 0..n-1.

    count must be a real integer: `true`, `2.5` and `"3"` are rejected.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["count"] = "count"
    count: StrictInt


class ForEachExpansion(BaseModel):
    """`for_each = {...}`: one instance per key.

    A list is accepted as shorthand for a set of strings, where every item
    is both key and value. Keys are validated by the expander, not here, so
    that bad keys surface as InvalidForEachKeyError.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["for_each"] = "for_each"
    for_each: dict[Any, Any] | list[Any]


Expansion = Annotated[CountExpansion | ForEachExpansion, Field(discriminator="kind")]


# =============================================================================
# Declarations
# =============================================================================


class ResourceDeclaration(BaseModel):
    """A single authored resource definition, prior to expansion.

    Configuration files write the expansion strategy the Terraform way, as a
    top-level `count` or `for_each` key; both are lifted into `expansion`.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    name: str
    expansion: Expansion | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    depends_on: list[ResourceAddress] = Field(default_factory=list)
    provider: str | None = Field(
        default=None, description="Provider configuration, e.g. 'aws.west'"
    )

    @model_validator(mode="before")
    @classmethod
    def _lift_meta_arguments(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        count = data.pop("count", None)
        for_each = data.pop("for_each", None)

        if count is not None and for_each is not None:
            raise ValueError('"count" and "for_each" are mutually exclusive')
        if (count is not None or for_each is not None) and data.get("expansion"):
            raise ValueError(
                '"expansion" cannot be combined with "count" or "for_each"'
            )

        if count is not None:
            data["expansion"] = {"kind": "count", "count": count}
        elif for_each is not None:
            data["expansion"] = {"kind": "for_each", "for_each": for_each}
        return data

    @field_validator("type", "name")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"Invalid identifier: {value!r}")
        return value

    @property
    def address(self) -> ResourceAddress:
        return ResourceAddress(type=self.type, name=self.name)

    @property
    def strategy(self) -> Literal["none", "count", "for_each"]:
        if self.expansion is None:
            return "none"
        return self.expansion.kind

    def __str__(self) -> str:
        return str(self.address)


class ConfigurationSpec(BaseModel):
    """A configuration file: a flat list of resource declarations."""

    resources: list[ResourceDeclaration] = Field(default_factory=list)


# =============================================================================
# Instances, edges and plans
# =============================================================================


class ResourceInstance(BaseModel):
    """One concrete instance arising from expanding a declaration."""

    address: InstanceAddress
    each_value: Any = None
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="Attributes with count.index / each.* rendered for this instance",
    )

    @property
    def resource(self) -> ResourceAddress:
        return self.address.resource

    @property
    def key(self) -> int | str | None:
        return self.address.key

    def __str__(self) -> str:
        return str(self.address)


class DependencyEdge(BaseModel):
    """source depends on target: target must be realized before source."""

    model_config = ConfigDict(frozen=True)

    source: InstanceAddress
    target: InstanceAddress
    kind: Literal["explicit", "implicit"]


class ExecutionPlan(BaseModel):
    """A topologically valid ordering of every instance."""

    status: Literal["planned"] = "planned"
    instances: list[ResourceInstance]
    stages: list[list[InstanceAddress]] = Field(
        default_factory=list,
        description="Waves of instances whose dependencies all lie in earlier waves",
    )

    @property
    def order(self) -> list[InstanceAddress]:
        return [inst.address for inst in self.instances]

    @property
    def destroy_order(self) -> list[InstanceAddress]:
        """Dependents before their dependencies."""
        return list(reversed(self.order))

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "order": [str(a) for a in self.order],
            "stages": [[str(a) for a in stage] for stage in self.stages],
            "destroy_order": [str(a) for a in self.destroy_order],
        }

    def summary(self) -> str:
        """Get a text summary of the plan."""
        lines = [
            f"Instances: {len(self.instances)}",
            f"Stages: {len(self.stages)}",
            "",
            "Execution order:",
        ]
        for i, address in enumerate(self.order, 1):
            lines.append(f"  {i}. {address}")
        return "\n".join(lines)
