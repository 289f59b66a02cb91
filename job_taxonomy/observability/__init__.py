"""Structured logging setup for classification runs."""

from job_taxonomy.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)


__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
]
