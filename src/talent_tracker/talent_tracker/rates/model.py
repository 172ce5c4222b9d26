from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional

from ..core import constants
from ..core.enums import TimeType, WorkerRole


@dataclass(frozen=True)
class BreakDefaults:
    escort: int = constants.DEFAULT_ESCORT_BREAK_MINUTES
    staff: int = constants.DEFAULT_STAFF_BREAK_MINUTES

    def for_role(self, role: WorkerRole) -> int:
        return self.escort if role == WorkerRole.ESCORT else self.staff


@dataclass(frozen=True)
class RateRule:
    """Immutable pay and break configuration passed into every calculation.

    Loaded once per request by RateRuleService; the calculation engine never
    reads configuration from anywhere else.
    """

    rate: Decimal
    time_type: TimeType = TimeType.HOURLY
    overtime_threshold_hours: Decimal = constants.DEFAULT_OVERTIME_THRESHOLD_HOURS
    overtime_multiplier: Decimal = constants.DEFAULT_OVERTIME_MULTIPLIER
    default_break_minutes: BreakDefaults = field(default_factory=BreakDefaults)
    worker_role: WorkerRole = WorkerRole.STAFF
    break_grace_period_minutes: int = constants.DEFAULT_BREAK_GRACE_MINUTES
    max_shift_hours: Decimal = constants.DEFAULT_MAX_SHIFT_HOURS
    overtime_warning_hours: Decimal = constants.DEFAULT_OVERTIME_WARNING_HOURS
    missing_break_threshold_hours: Decimal = constants.DEFAULT_MISSING_BREAK_THRESHOLD_HOURS
    manual_edit_threshold_hours: Decimal = constants.DEFAULT_MANUAL_EDIT_THRESHOLD_HOURS
    submission_opens_on_start_date: bool = True

    @property
    def default_break_duration(self) -> int:
        return self.default_break_minutes.for_role(self.worker_role)

    def with_overrides(self, **changes) -> "RateRule":
        return replace(self, **changes)


@dataclass(frozen=True)
class GlobalSettings:
    """The single `system_settings` row."""

    escort_break_minutes: int = constants.DEFAULT_ESCORT_BREAK_MINUTES
    staff_break_minutes: int = constants.DEFAULT_STAFF_BREAK_MINUTES
    break_grace_minutes: int = constants.DEFAULT_BREAK_GRACE_MINUTES
    max_shift_hours: Decimal = constants.DEFAULT_MAX_SHIFT_HOURS
    overtime_warning_hours: Decimal = constants.DEFAULT_OVERTIME_WARNING_HOURS
    overtime_threshold_hours: Decimal = constants.DEFAULT_OVERTIME_THRESHOLD_HOURS
    overtime_multiplier: Decimal = constants.DEFAULT_OVERTIME_MULTIPLIER
    submission_opens_on_start_date: bool = True
    in_house_can_approve_timecards: bool = True
    supervisor_can_approve_timecards: bool = False
    coordinator_can_approve_timecards: bool = False

    def base_rule(self) -> RateRule:
        return RateRule(
            rate=Decimal("0"),
            overtime_threshold_hours=self.overtime_threshold_hours,
            overtime_multiplier=self.overtime_multiplier,
            default_break_minutes=BreakDefaults(escort=self.escort_break_minutes, staff=self.staff_break_minutes),
            break_grace_period_minutes=self.break_grace_minutes,
            max_shift_hours=self.max_shift_hours,
            overtime_warning_hours=self.overtime_warning_hours,
            submission_opens_on_start_date=self.submission_opens_on_start_date,
        )


@dataclass(frozen=True)
class RoleRate:
    """Project role template: base pay for a role on a project."""

    project_id: str
    role: str
    base_pay_rate: Decimal
    time_type: TimeType = TimeType.HOURLY
    overtime_threshold_hours: Optional[Decimal] = None
    overtime_multiplier: Optional[Decimal] = None


@dataclass(frozen=True)
class TeamAssignment:
    project_id: str
    user_id: str
    role: str
    pay_rate: Optional[Decimal] = None
