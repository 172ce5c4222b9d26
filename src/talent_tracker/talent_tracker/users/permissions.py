from __future__ import annotations

from typing import Optional

from ..core.enums import SystemRole
from ..rates.model import GlobalSettings


def can_approve_timecards(role: Optional[SystemRole], settings: GlobalSettings) -> bool:
    """Admins always approve; other roles only when the settings row allows it."""
    if role == SystemRole.ADMIN:
        return True
    if role == SystemRole.IN_HOUSE:
        return settings.in_house_can_approve_timecards
    if role == SystemRole.SUPERVISOR:
        return settings.supervisor_can_approve_timecards
    if role == SystemRole.COORDINATOR:
        return settings.coordinator_can_approve_timecards
    return False
