"""Observability components: logging, metrics, and tracing."""

from app.observability.logging import (
    bind_context,
    clear_context,
    get_context,
    get_logger,
    logger,
    setup_logging,
)
from app.observability.metrics import setup_metrics
from app.observability.tracing import (
    add_span_attributes,
    setup_tracing,
    shutdown_tracing,
)


__all__ = [
    "add_span_attributes",
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
    "setup_metrics",
    "setup_tracing",
    "shutdown_tracing",
]
