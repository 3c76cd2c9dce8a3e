"""Structured logging and OpenTelemetry spans for remix-cairo.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helpers for compilation pipeline operations
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

# Module-level logger and tracer
_logger: BoundLogger | None = None
_tracer: Tracer | None = None

TRACER_NAME = "remix_cairo"


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("artifact_registered", name="counter.cairo")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for remix-cairo.

    Returns:
        OpenTelemetry Tracer instance.
    """
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for remix-cairo.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    import logging

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    """Create an OpenTelemetry span that logs its start, outcome and duration.

    Args:
        name: Span name (e.g., "compiler.compile").
        kind: Span kind (INTERNAL for local steps, CLIENT for remote stages).
        attributes: Optional span attributes, also bound to the log events.

    Yields:
        OpenTelemetry Span instance.
    """
    attrs = attributes or {}
    logger = get_logger().bind(**attrs)

    with get_tracer().start_as_current_span(name, kind=kind, attributes=attrs) as s:
        logger.debug(f"{name}_started")
        started = time.perf_counter()
        try:
            yield s
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{name}_failed", error=str(exc), duration_ms=_elapsed_ms(started))
            raise
        s.set_status(Status(StatusCode.OK))
        logger.info(f"{name}_completed", duration_ms=_elapsed_ms(started))


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


@contextmanager
def compiler_operation(
    operation: str,
    *,
    stage: str | None = None,
    endpoint: str | None = None,
    source: str | None = None,
) -> Iterator[Span]:
    """Create a span for compilation pipeline operations with standard attributes.

    Remote stages get a CLIENT span; local steps get an INTERNAL one.

    Args:
        operation: Operation name (e.g., "to_intermediate", "register").
        stage: Remote stage name, if the operation is a network call.
        endpoint: Endpoint URL being called.
        source: Source path being compiled.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with compiler_operation("to_final", stage="to-final"):
        ...     compiler.to_final(sierra)
    """
    attrs: dict[str, Any] = {"compiler.operation": operation}
    if stage:
        attrs["compiler.stage"] = stage
    if endpoint:
        attrs["compiler.endpoint"] = endpoint
    if source:
        attrs["compiler.source"] = source

    kind = SpanKind.CLIENT if stage else SpanKind.INTERNAL
    with span(f"compiler.{operation}", kind=kind, attributes=attrs) as s:
        yield s
