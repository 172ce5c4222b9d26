from __future__ import annotations

from typing import Optional, Protocol

from .model import GlobalSettings, RoleRate, TeamAssignment


class RateRepository(Protocol):
    def get_global_settings(self) -> Optional[GlobalSettings]:
        raise NotImplementedError

    def get_role_rate(self, *, project_id: str, role: str) -> Optional[RoleRate]:
        raise NotImplementedError

    def get_assignment(self, *, project_id: str, user_id: str) -> Optional[TeamAssignment]:
        raise NotImplementedError
