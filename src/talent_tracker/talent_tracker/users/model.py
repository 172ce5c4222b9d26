from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import SystemRole


@dataclass(frozen=True)
class Profile:
    """User profile mirrored from the hosted auth provider.

    Note: only identity and role are kept here; credentials never reach this service.
    """

    user_id: str
    full_name: str
    role: Optional[SystemRole]
    email: Optional[str] = None
