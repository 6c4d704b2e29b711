"""Interpolation parsing and reference extraction.

Attribute values are plain YAML/JSON data. Strings may embed Terraform-style
interpolations (`${...}`); only text inside an interpolation is treated as an
expression, so ordinary strings like "www.example.com" never look like
references.

All functions here work on plain data and return simple types, with no
dependency on terraplan models.
"""

import copy
import json
import re
from dataclasses import dataclass
from typing import Any, Iterator


# =============================================================================
# Constants
# =============================================================================

# Roots that never name a managed resource
RESERVED_ROOTS = frozenset(
    {
        "var",
        "local",
        "count",
        "each",
        "self",
        "path",
        "module",
        "data",
        "terraform",
    }
)

# `${...}`; a quoted string may contain "}", and `$${` is a literal "${"
INTERPOLATION_RE = re.compile(r'(?<!\$)\$\{((?:[^}"]|"(?:[^"\\]|\\.)*")*)\}')
_OPEN_RE = re.compile(r"(?<!\$)\$\{")

# String literals, except ones used as index keys (`["dev"]`)
_STRING_LITERAL_RE = re.compile(r'(?<!\[)"(?:[^"\\]|\\.)*"')

_REFERENCE_RE = re.compile(
    r'(?<![\w.\]"])'
    r"([A-Za-z_][\w-]*)\.([A-Za-z_][\w-]*)"
    r'(?:\[(\d+|"(?:[^"\\]|\\.)*")\])?'
)


@dataclass(frozen=True)
class Reference:
    """A resource reference found inside an interpolation.

    `key` is the literal index (int) or key (str) when the reference is
    qualified, otherwise None.
    """

    type: str
    name: str
    key: int | str | None = None

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    def __str__(self) -> str:
        if self.key is None:
            return self.address
        if isinstance(self.key, int):
            return f"{self.address}[{self.key}]"
        return f"{self.address}[{json.dumps(self.key)}]"


# =============================================================================
# Traversal
# =============================================================================


def iter_strings(value: Any) -> Iterator[str]:
    """Yield every string nested anywhere in a YAML/JSON value."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_strings(item)


def find_interpolations(text: str) -> list[str]:
    """Return the bodies of all `${...}` sequences in text.

    Example:
        >>> find_interpolations("${aws_vpc.main.id}/${var.suffix}")
        ['aws_vpc.main.id', 'var.suffix']
    """
    return [m.group(1) for m in INTERPOLATION_RE.finditer(text)]


# =============================================================================
# Reference extraction
# =============================================================================


def extract_references_from_expression(expr: str) -> list[Reference]:
    """Extract resource references from one interpolation body.

    Trailing attribute traversals are ignored, as are references rooted at
    var/local/count/each/self/path/module/data/terraform.

    Example:
        >>> extract_references_from_expression('aws_subnet.a["dev"].id')
        [Reference(type='aws_subnet', name='a', key='dev')]
    """
    cleaned = _STRING_LITERAL_RE.sub('""', expr)
    refs: list[Reference] = []
    for match in _REFERENCE_RE.finditer(cleaned):
        root, name, index = match.groups()
        if root in RESERVED_ROOTS:
            continue
        key: int | str | None = None
        if index is not None:
            key = int(index) if index.isdigit() else json.loads(index)
        refs.append(Reference(type=root, name=name, key=key))
    return refs


def extract_references(value: Any) -> list[Reference]:
    """Extract all resource references from a (nested) attribute value.

    Returns references in first-seen order without duplicates.
    """
    seen: dict[Reference, None] = {}
    for text in iter_strings(value):
        for body in find_interpolations(text):
            for ref in extract_references_from_expression(body):
                seen.setdefault(ref, None)
    return list(seen)


def validate_interpolation_syntax(text: str) -> str | None:
    """Return an error message if text has an unterminated interpolation."""
    pos = 0
    while (opening := _OPEN_RE.search(text, pos)) is not None:
        match = INTERPOLATION_RE.match(text, opening.start())
        if match is None:
            return f"unterminated interpolation at offset {opening.start()}"
        pos = match.end()
    return None


# =============================================================================
# Rendering
# =============================================================================


def _to_literal(value: Any) -> str | None:
    """Expression-syntax literal for a scalar, or None for composite values."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return json.dumps(value)
    return None


def _parse_literal(body: str) -> tuple[bool, Any]:
    """Parse body as a single scalar literal. Returns (ok, value)."""
    body = body.strip()
    if body in ("true", "false"):
        return True, body == "true"
    try:
        value = json.loads(body)
    except ValueError:
        return False, None
    if isinstance(value, (int, float, str)):
        return True, value
    return False, None


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value)


def _substitute(body: str, bindings: dict[str, Any]) -> str:
    for name, value in bindings.items():
        literal = _to_literal(value)
        if literal is None:
            continue
        pattern = rf"(?<![\w.]){re.escape(name)}(?![\w.\[])"
        body = re.sub(pattern, lambda _m: literal, body)
    return body


def render_string(text: str, bindings: dict[str, Any]) -> Any:
    """Substitute bindings (e.g. count.index) inside interpolations.

    Interpolations that reduce to a literal are collapsed into the
    surrounding text. A string made of a single interpolation takes the
    bound value's own type, so "${count.index}" renders as an int.

    Example:
        >>> render_string("10.0.${count.index}.0/24", {"count.index": 2})
        '10.0.2.0/24'
        >>> render_string("${aws_subnet.a[count.index].id}", {"count.index": 2})
        '${aws_subnet.a[2].id}'
    """
    matches = list(INTERPOLATION_RE.finditer(text))
    if not matches:
        return text

    if len(matches) == 1 and matches[0].span() == (0, len(text)):
        body = matches[0].group(1).strip()
        if body in bindings:
            return copy.deepcopy(bindings[body])

    parts: list[str] = []
    last = 0
    for match in matches:
        parts.append(text[last : match.start()])
        body = _substitute(match.group(1), bindings)
        ok, value = _parse_literal(body)
        if ok:
            if len(matches) == 1 and match.span() == (0, len(text)):
                return value
            parts.append(_to_text(value))
        else:
            parts.append("${" + body + "}")
        last = match.end()
    parts.append(text[last:])
    return "".join(parts)


def render_value(value: Any, bindings: dict[str, Any]) -> Any:
    """Render every string in a nested value. Returns a new structure."""
    if isinstance(value, str):
        return render_string(value, bindings)
    if isinstance(value, dict):
        return {k: render_value(v, bindings) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [render_value(v, bindings) for v in value]
    return value
