"""Social counter engine and its repair job."""

from app.services.social.repair import CounterRepairService, RepairReport
from app.services.social.service import SocialService, ToggleOutcome


__all__ = ["CounterRepairService", "RepairReport", "SocialService", "ToggleOutcome"]
