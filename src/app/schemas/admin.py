"""Admin operation schemas.

Provides response models for admin maintenance endpoints.
"""

from __future__ import annotations

from pydantic import Field

from app.schemas.base import APIResponse


class RepairQueuedResponse(APIResponse):
    """A counter repair handed to the background worker."""

    job_id: str = Field(..., description="Job id; stable while a run is queued")
    message: str = Field(
        default="Counter repair queued",
        examples=["Counter repair queued"],
    )
