from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import WorkerRole
from ..projects.repository import ProjectRepository
from .model import BreakDefaults, GlobalSettings, RateRule
from .repository import RateRepository

logger = logging.getLogger(__name__)

ESCORT_ROLES = {"talent_escort", "escort"}


def worker_role_for(role: Optional[str]) -> WorkerRole:
    """Escorts get the short default break; everyone else is staff."""
    return WorkerRole.ESCORT if (role or "").lower() in ESCORT_ROLES else WorkerRole.STAFF


class RateRuleService:
    """Resolve the effective RateRule for a worker on a project.

    Precedence (most specific wins): team assignment pay rate, project role
    rate, project break overrides, global settings row, built-in defaults.
    """

    def __init__(self, rates: RateRepository, projects: ProjectRepository):
        self._rates = rates
        self._projects = projects

    def global_settings(self) -> GlobalSettings:
        settings = self._rates.get_global_settings()
        if settings is None:
            logger.warning("system_settings row missing, using built-in defaults")
            return GlobalSettings()
        return settings

    def default_rule(self) -> RateRule:
        return self.global_settings().base_rule()

    def load_rate_rule(self, project_id: str, role: Optional[str], *, user_id: Optional[str] = None) -> RateRule:
        rule = self.default_rule().with_overrides(worker_role=worker_role_for(role))

        project = self._projects.get_by_id(project_id)
        if project:
            defaults = rule.default_break_minutes
            rule = rule.with_overrides(
                default_break_minutes=BreakDefaults(
                    escort=project.escort_break_minutes or defaults.escort,
                    staff=project.staff_break_minutes or defaults.staff,
                )
            )

        if role:
            role_rate = self._rates.get_role_rate(project_id=project_id, role=role)
            if role_rate:
                rule = rule.with_overrides(
                    rate=role_rate.base_pay_rate,
                    time_type=role_rate.time_type,
                    overtime_threshold_hours=role_rate.overtime_threshold_hours or rule.overtime_threshold_hours,
                    overtime_multiplier=role_rate.overtime_multiplier or rule.overtime_multiplier,
                )
            else:
                logger.warning("no rate configured for role=%s project=%s", role, project_id)

        if user_id:
            assignment = self._rates.get_assignment(project_id=project_id, user_id=user_id)
            if assignment and assignment.pay_rate is not None:
                rule = rule.with_overrides(rate=assignment.pay_rate)

        return rule

    def rule_for_worker(self, *, project_id: str, user_id: str) -> RateRule:
        assignment = self._rates.get_assignment(project_id=project_id, user_id=user_id)
        if not assignment:
            logger.warning("no team assignment for user=%s project=%s", user_id, project_id)
            return self.load_rate_rule(project_id, None)
        return self.load_rate_rule(project_id, assignment.role, user_id=user_id)
