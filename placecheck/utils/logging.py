"""Structured logging utilities using structlog for pipeline context and tracing."""

import sys
import uuid
from typing import Any, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer

from placecheck.config.settings import settings


def configure_structured_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structured logging with appropriate processors and renderers.

    Uses:
    - Console renderer for development (colorized, human-readable)
    - JSON renderer for production (structured, machine-readable)
    - Context binding for run_id via contextvars
    """
    level = (log_level or settings.log_level).upper()
    fmt = (log_format or settings.log_format).lower()

    processors: list[Any] = [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if sys.stderr.isatty() and fmt == "console":
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_structured_logger(
    name: str,
    run_id: Optional[str] = None,
    **additional_context: Any,
) -> structlog.BoundLogger:
    """
    Get a structured logger with bound context.

    Args:
        name: Logger name (typically the component name)
        run_id: Optional correlation ID for one resolution
        **additional_context: Additional context to bind

    Example:
        >>> logger = get_structured_logger("ParagraphVerifier", run_id="abc-123")
        >>> logger.info("claim_verified", verdict="true", evidence=2)
    """
    logger = structlog.get_logger(name).bind(component=name)
    if run_id:
        logger = logger.bind(run_id=run_id)
    if additional_context:
        logger = logger.bind(**additional_context)
    return logger


def new_run_id() -> str:
    """Generate a correlation ID for one pipeline run."""
    return str(uuid.uuid4())


__all__ = [
    "configure_structured_logging",
    "get_structured_logger",
    "new_run_id",
]
