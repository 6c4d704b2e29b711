"""Configuration loading.

Two file shapes are accepted, in YAML or JSON files:

Flat list (terraplan's own format):

    resources:
      - type: aws_subnet
        name: private
        count: 3
        attributes:
          vpc_id: ${aws_vpc.main.id}
        depends_on: [aws_vpc.main]

Terraform JSON syntax (*.tf.json):

    {"resource": {"aws_subnet": {"private": {"count": 3, "vpc_id": "${aws_vpc.main.id}"}}}}

where count, for_each, depends_on and provider are meta-arguments and every
other key is an attribute.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .core.errors import ConfigurationError
from .core.models import ConfigurationSpec, ResourceDeclaration
from .engine import DeclarationStore
from .utils import discover_configuration_files

logger = logging.getLogger(__name__)

META_ARGUMENTS = ("count", "for_each", "depends_on", "provider")


def _terraform_blocks(value: Any, what: str, source: str) -> list[dict]:
    """Terraform JSON allows a block to be an object or a list of objects."""
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list) and all(isinstance(v, dict) for v in value):
        return value
    raise ConfigurationError(source, f"{what} must be an object or list of objects")


def parse_terraform_syntax(data: dict, source: str = "<data>") -> list[dict[str, Any]]:
    """
    Convert Terraform JSON-syntax data into declaration dicts.

    Args:
        data: Parsed document with a top-level "resource" key
        source: File name used in error messages

    Returns:
        One dict per resource, in document order, ready for
        ResourceDeclaration.model_validate
    """
    declarations = []
    for resource_block in _terraform_blocks(data.get("resource", {}), "resource", source):
        for rtype, by_name in resource_block.items():
            for named in _terraform_blocks(by_name, f"resource {rtype}", source):
                for name, body in named.items():
                    blocks = _terraform_blocks(body, f"resource {rtype}.{name}", source)
                    if len(blocks) != 1:
                        raise ConfigurationError(
                            source, f"resource {rtype}.{name} is declared {len(blocks)} times"
                        )
                    body = blocks[0]
                    decl: dict[str, Any] = {"type": rtype, "name": name}
                    for key in META_ARGUMENTS:
                        if key in body:
                            decl[key] = body[key]
                    decl["attributes"] = {
                        k: v for k, v in body.items() if k not in META_ARGUMENTS
                    }
                    declarations.append(decl)
    return declarations


def _read_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(str(path), f"cannot read file: {e}") from e
    try:
        if path.name.endswith(".json"):
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(str(path), f"cannot parse file: {e}") from e


def load_declarations(path: str | Path) -> list[ResourceDeclaration]:
    """
    Read every declaration from a configuration file or directory.

    Args:
        path: A .yaml/.yml/.tf.json file, or a directory of them

    Returns:
        Declarations in file-name order, then document order

    Raises:
        FileNotFoundError: If the path does not exist
        ConfigurationError: If a file cannot be parsed or fails validation
    """
    declarations: list[ResourceDeclaration] = []
    for file in discover_configuration_files(path):
        data = _read_document(file) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(str(file), "top level must be a mapping")
        try:
            if "resource" in data:
                declarations.extend(
                    ResourceDeclaration.model_validate(d)
                    for d in parse_terraform_syntax(data, str(file))
                )
            else:
                declarations.extend(ConfigurationSpec.model_validate(data).resources)
        except ValidationError as e:
            raise ConfigurationError(str(file), str(e)) from e
        logger.debug("Loaded %s", file)
    return declarations


def load_configuration(path: str | Path) -> DeclarationStore:
    """Load a configuration file or directory into a DeclarationStore.

    Raises:
        FileNotFoundError: If the path does not exist
        ConfigurationError: If a file cannot be parsed or fails validation
        DuplicateIdentifierError: If an address is declared more than once
    """
    store = DeclarationStore(load_declarations(path))
    logger.info("Loaded %d declarations from %s", len(store), path)
    return store
