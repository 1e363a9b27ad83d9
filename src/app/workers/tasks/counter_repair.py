"""Counter repair background task.

This module provides the ARQ task that converges the denormalized social
and comment counters, run nightly by cron and on demand from the admin API.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from app.observability.logging import get_logger
from app.services.social.repair import CounterRepairService


logger = get_logger(__name__)


async def repair_social_counters(ctx: dict[str, Any]) -> dict[str, Any]:
    """Recompute recipe counters and re-mirror user liked/saved lists.

    Args:
        ctx: ARQ worker context. A ``repair_service`` placed there by the
            startup hook is used when present.

    Returns:
        Result dict with status and the repair report.
    """
    service: CounterRepairService = ctx.get("repair_service") or CounterRepairService()
    logger.info("Starting counter repair", job_id=ctx.get("job_id"))

    try:
        report = await service.repair_counters()
    except Exception:
        logger.exception("Counter repair failed")
        raise

    return {"status": "completed", **asdict(report)}
