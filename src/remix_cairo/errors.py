"""Custom exceptions for remix-cairo.

This module defines the exception hierarchy:
- RemixCairoError (base)
- RemoteCompilationError
- MalformedIntermediateError
- PersistenceError
"""

from __future__ import annotations

STAGE_TO_INTERMEDIATE = "to-intermediate"
STAGE_TO_FINAL = "to-final"


class RemixCairoError(Exception):
    """Base exception for all remix-cairo operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.

    Example:
        >>> try:
        ...     orchestrator.compile(unit)
        ... except RemixCairoError as e:
        ...     print(f"Compilation pipeline failed: {e}")
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize RemixCairoError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class RemoteCompilationError(RemixCairoError):
    """A remote compilation stage failed.

    Raised when:
    - The compiler endpoint is unreachable or times out
    - The endpoint answers with a non-success status
    - The response body cannot be decoded

    Attributes:
        stage: Pipeline stage that failed ("to-intermediate" or "to-final").
        cause: The underlying cause.
        status_code: HTTP status when the server answered, else None.

    Example:
        >>> try:
        ...     compiler.to_intermediate(source)
        ... except RemoteCompilationError as e:
        ...     print(e.stage)
        to-intermediate
    """

    def __init__(
        self,
        stage: str,
        cause: str,
        *,
        status_code: int | None = None,
        message: str | None = None,
    ) -> None:
        """Initialize RemoteCompilationError.

        Args:
            stage: Pipeline stage that failed.
            cause: The underlying cause of the failure.
            status_code: HTTP status code, if a response was received.
            message: Optional custom error message.
        """
        details = {"stage": stage, "cause": cause}
        if status_code is not None:
            details["status_code"] = str(status_code)
        super().__init__(message or f"Remote compilation failed at stage {stage}", details=details)
        self.stage = stage
        self.cause = cause
        self.status_code = status_code


class MalformedIntermediateError(RemixCairoError):
    """The intermediate representation is not a usable Sierra document.

    Raised when the stage 1 output is not valid JSON, is not a JSON object,
    or lacks the fields the class hash is computed from.

    Example:
        >>> try:
        ...     hasher.parse("not json")
        ... except MalformedIntermediateError as e:
        ...     print(e.cause)
    """

    def __init__(self, cause: str, message: str | None = None) -> None:
        """Initialize MalformedIntermediateError.

        Args:
            cause: Description of what made the document unusable.
            message: Optional custom error message.
        """
        super().__init__(message or "Malformed intermediate representation", details={"cause": cause})
        self.cause = cause


class PersistenceError(RemixCairoError):
    """Writing compiled output to the file store failed.

    Non-fatal to catalog state: the artifact stays registered.

    Attributes:
        path: File path being written or switched to.
        operation: File store operation that failed ("write_file", "switch_active_file").
        cause: The underlying cause.
    """

    def __init__(self, path: str, operation: str, cause: str) -> None:
        """Initialize PersistenceError.

        Args:
            path: File path involved in the failed operation.
            operation: Name of the failed file store operation.
            cause: The underlying cause.
        """
        super().__init__(
            f"Failed to persist compiled output: {path}",
            details={"operation": operation, "cause": cause},
        )
        self.path = path
        self.operation = operation
        self.cause = cause
