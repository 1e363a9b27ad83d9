"""Background task functions run by the ARQ worker."""

from app.workers.tasks.counter_repair import repair_social_counters


__all__ = ["repair_social_counters"]
