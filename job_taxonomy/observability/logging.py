"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON or console output and standard processors
    for timestamps, log levels, and context binding.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    # httpx logs through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=max(level, logging.WARNING),
    )


def bind_run_context(run_id: str, designation: str | None = None) -> None:
    """Bind run context to all subsequent log messages.

    Args:
        run_id: Unique run identifier.
        designation: Designation currently being classified.
    """
    context: dict[str, str] = {"run_id": run_id}
    if designation is not None:
        context["designation"] = designation
    structlog.contextvars.bind_contextvars(**context)


def clear_run_context() -> None:
    """Clear run context from log messages."""
    structlog.contextvars.unbind_contextvars("run_id", "designation")
