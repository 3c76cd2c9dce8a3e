"""CLI error handling for remix-cairo.

Maps pipeline exceptions to user-facing messages and exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from remix_cairo.cli.output import error
from remix_cairo.errors import (
    MalformedIntermediateError,
    PersistenceError,
    RemixCairoError,
    RemoteCompilationError,
)

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Compilation failure, unusable compiler output, bad option
EXIT_SYSTEM_ERROR = 2  # Missing file, write failure


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting."""
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - timeout_seconds: Input should be greater than 0"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)


def exit_code_for(err: RemixCairoError) -> int:
    """Return the CLI exit code for a pipeline error."""
    if isinstance(err, PersistenceError):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


def describe_pipeline_error(err: RemixCairoError) -> str:
    """Return a one-line user-facing description of a pipeline error."""
    if isinstance(err, RemoteCompilationError):
        return f"Compilation failed at stage {err.stage}: {err.cause}"
    if isinstance(err, MalformedIntermediateError):
        return f"Unusable Sierra document: {err.cause}"
    if isinstance(err, PersistenceError):
        return f"Could not write {err.path}: {err.cause}"
    return str(err)


def handle_file_not_found(file_path: str) -> NoReturn:
    """Raise a CLIError for a missing input file."""
    raise CLIError(f"File not found: {file_path}", exit_code=EXIT_SYSTEM_ERROR)
