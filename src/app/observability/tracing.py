"""OpenTelemetry tracing.

FastAPI and Redis are instrumented automatically; services annotate the
active span with entity ids through ``add_span_attributes``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

    from app.core.config import Settings

logger = get_logger(__name__)


def setup_tracing(app: FastAPI, settings: Settings | None = None) -> None:
    """Install a tracer provider and instrument FastAPI and Redis.

    Spans are exported only when an OTLP endpoint is configured.
    """
    settings = settings or get_settings()
    tracing = settings.observability.tracing

    if not tracing.enabled:
        logger.info("Tracing disabled")
        return

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.app.name.lower().replace(" ", "-"),
                "service.version": settings.app.version,
                "deployment.environment": settings.APP_ENV,
            }
        )
    )
    if tracing.otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=tracing.otlp_endpoint, insecure=True)
            )
        )
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app, excluded_urls="health,ready,metrics")
    RedisInstrumentor().instrument()

    logger.info("OpenTelemetry tracing configured", endpoint=tracing.otlp_endpoint)


def shutdown_tracing() -> None:
    """Flush pending spans before the process exits."""
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()
        logger.info("Tracing shutdown complete")


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Annotate the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


__all__ = [
    "add_span_attributes",
    "setup_tracing",
    "shutdown_tracing",
]
