"""Shared CLI plumbing: exit codes, dual-mode output and configuration loading.

Every command renders through Output, so the same run can either print rich
text for a person or a single JSON document for a script:

    out = Output(console=console, json_mode=is_json_output())
    store = load_store(path, out)
    if store is None:
        raise typer.Exit(out.finish())
    out.success("Planned 4 instances", instance_count=4)
    raise typer.Exit(out.finish())
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.errors import (
    ConfigurationError,
    CyclicDependencyError,
    DuplicateIdentifierError,
    ExpansionLimitExceededError,
    InvalidCountError,
    InvalidForEachKeyError,
    NotFoundError,
    PlanError,
    UnresolvedReferenceError,
)
from ..engine import DeclarationStore
from ..loader import load_configuration


class ExitCode:
    """Process exit codes, one per failure family.

        0 = Success
        1 = Invalid configuration file
        3 = File not found
        4 = Expansion error (bad count / for_each, expansion limit)
        5 = Unresolved reference
        6 = Cyclic dependency
        7 = Duplicate or unknown resource address
    """

    SUCCESS = 0
    VALIDATION_ERROR = 1
    FILE_NOT_FOUND = 3
    EXPANSION_ERROR = 4
    REFERENCE_ERROR = 5
    CYCLE_ERROR = 6
    IDENTIFIER_ERROR = 7


_EXIT_CODES: list[tuple[tuple[type[PlanError], ...], int]] = [
    ((ConfigurationError,), ExitCode.VALIDATION_ERROR),
    (
        (InvalidCountError, InvalidForEachKeyError, ExpansionLimitExceededError),
        ExitCode.EXPANSION_ERROR,
    ),
    ((UnresolvedReferenceError,), ExitCode.REFERENCE_ERROR),
    ((CyclicDependencyError,), ExitCode.CYCLE_ERROR),
    ((DuplicateIdentifierError, NotFoundError), ExitCode.IDENTIFIER_ERROR),
]


def exit_code_for(error: PlanError) -> int:
    """Map a planning error to its CLI exit code."""
    for families, code in _EXIT_CODES:
        if isinstance(error, families):
            return code
    return ExitCode.VALIDATION_ERROR


def _entry(message: str, **fields: Any) -> dict[str, Any]:
    """A JSON warning/error object, leaving out empty fields."""
    entry: dict[str, Any] = {"message": message}
    entry.update({k: v for k, v in fields.items() if v is not None})
    return entry


class Output(BaseModel):
    """Result sink for one CLI invocation.

    Human mode prints as it goes. JSON mode buffers everything into one
    document, printed by finish(), that always has "status", "warnings",
    "errors" and "exit_code".
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    console: Console
    json_mode: bool = False

    _payload: dict[str, Any] = PrivateAttr(
        default_factory=lambda: {"status": "success", "warnings": [], "errors": []}
    )
    _exit_code: int = PrivateAttr(default=ExitCode.SUCCESS)

    @property
    def exit_code(self) -> int:
        return self._exit_code

    def _echo(self, symbol: str, message: str, suggestion: str | None) -> None:
        self.console.print(f"{symbol} {escape(message)}")
        if suggestion:
            self.console.print(f"  [dim]→ {escape(suggestion)}[/dim]")

    def success(self, message: str, **data: Any) -> None:
        """Report the command's result; data only appears in JSON output."""
        if self.json_mode:
            self._payload.update(data)
        else:
            self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(
        self,
        message: str,
        *,
        resource: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        if self.json_mode:
            self._payload["warnings"].append(
                _entry(message, resource=resource, suggestion=suggestion)
            )
        else:
            self._echo("[yellow]⚠[/yellow]", message, suggestion)

    def error(
        self,
        message: str,
        *,
        exit_code: int = ExitCode.VALIDATION_ERROR,
        suggestion: str | None = None,
        **details: Any,
    ) -> None:
        """Record a failure; the last one reported decides the exit code."""
        self._exit_code = exit_code
        self._payload["status"] = "error"
        if self.json_mode:
            self._payload["errors"].append(
                _entry(message, suggestion=suggestion, **details)
            )
        else:
            self._echo("[red]✗[/red]", message, suggestion)

    def plan_error(self, error: PlanError) -> None:
        """Report a planning error verbatim, with its structured details in JSON."""
        details: dict[str, Any] = {
            "resource": str(error.declaration) if error.declaration else None,
            "category": type(error).__name__,
        }
        if isinstance(error, CyclicDependencyError):
            details["cycle"] = [str(a) for a in error.cycle]
        if isinstance(error, UnresolvedReferenceError):
            details["reference"] = error.reference
        self.error(str(error), exit_code=exit_code_for(error), **details)

    def note(self, message: str) -> None:
        """Extra human-mode detail; JSON output carries it in success data."""
        if not self.json_mode:
            self.console.print(message)

    def blank(self) -> None:
        if not self.json_mode:
            self.console.print()

    def table(
        self, title: str, columns: list[str], rows: list[list[str]], *, key: str
    ) -> None:
        """Print a table, or store it under `key` as a list of row objects."""
        if self.json_mode:
            self._payload[key] = [dict(zip(columns, row)) for row in rows]
            return
        table = Table(title=title, header_style="bold")
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self.console.print(table)

    def set_data(self, key: str, value: Any) -> None:
        self._payload[key] = value

    def finish(self) -> int:
        """Flush JSON output (if any) and return the exit code."""
        if self.json_mode:
            self._payload["exit_code"] = self._exit_code
            print(json.dumps(self._payload, indent=2, default=str))
        return self._exit_code


def load_store(path: Path, out: Output) -> DeclarationStore | None:
    """Load a configuration, reporting failures on `out`.

    Returns None (with the exit code set on `out`) if loading failed.
    """
    if not path.exists():
        out.error(
            f"File not found: {path}",
            exit_code=ExitCode.FILE_NOT_FOUND,
            suggestion=f"Check the file path: {path.absolute()}",
        )
        return None

    try:
        return load_configuration(path)
    except PlanError as e:
        out.plan_error(e)
        return None
