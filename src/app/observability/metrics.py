"""Prometheus metrics.

HTTP metrics come from prometheus-fastapi-instrumentator; the counters below
track the denormalized-state operations so drift and repair activity are
visible on dashboards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator, metrics

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

logger = get_logger(__name__)

_NAMESPACE = "recipe_community"

SOCIAL_TOGGLES = Counter(
    "social_toggles_total",
    "Like/save toggles applied to recipes",
    ["kind", "action"],
    namespace=_NAMESPACE,
)

COMMENT_OPERATIONS = Counter(
    "comment_operations_total",
    "Comment thread mutations",
    ["operation"],
    namespace=_NAMESPACE,
)

CONSISTENCY_RISKS = Counter(
    "consistency_risks_total",
    "Partial multi-document updates left for the repair job",
    ["operation"],
    namespace=_NAMESPACE,
)

COUNTER_REPAIRS = Counter(
    "counter_repairs_total",
    "Documents corrected by the counter repair job",
    ["collection"],
    namespace=_NAMESPACE,
)


def setup_metrics(app: FastAPI) -> Instrumentator:
    """Instrument the app and expose ``{prefix}/metrics``."""
    settings = get_settings()

    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return Instrumentator()

    prefix = settings.api.v1_prefix

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[
            f"{prefix}/health",
            f"{prefix}/ready",
            f"{prefix}/metrics",
        ],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.add(
        metrics.default(
            metric_namespace=_NAMESPACE,
            metric_subsystem="http",
        )
    )
    instrumentator.instrument(app)

    metrics_endpoint = f"{prefix}/metrics"
    instrumentator.expose(
        app,
        endpoint=metrics_endpoint,
        include_in_schema=False,
    )

    logger.info("Prometheus metrics configured", endpoint=metrics_endpoint)
    return instrumentator


__all__ = [
    "COMMENT_OPERATIONS",
    "CONSISTENCY_RISKS",
    "COUNTER_REPAIRS",
    "SOCIAL_TOGGLES",
    "setup_metrics",
]
