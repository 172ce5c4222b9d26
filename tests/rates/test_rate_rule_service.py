from __future__ import annotations

from decimal import Decimal

from src.talent_tracker.talent_tracker.core.enums import TimeType, WorkerRole
from src.talent_tracker.talent_tracker.projects.model import Project
from src.talent_tracker.talent_tracker.rates.model import GlobalSettings, RoleRate, TeamAssignment
from src.talent_tracker.talent_tracker.rates.service import RateRuleService, worker_role_for


def test_escort_roles_get_escort_defaults():
    assert worker_role_for("talent_escort") == WorkerRole.ESCORT
    assert worker_role_for("escort") == WorkerRole.ESCORT
    assert worker_role_for("supervisor") == WorkerRole.STAFF
    assert worker_role_for(None) == WorkerRole.STAFF


def test_role_rate_applies_for_project(repos):
    svc = RateRuleService(repos.rates, repos.projects)

    rule = svc.load_rate_rule("proj-1", "supervisor")

    assert rule.rate == Decimal("300.00")
    assert rule.time_type == TimeType.DAILY
    assert rule.worker_role == WorkerRole.STAFF
    assert rule.default_break_duration == 60


def test_assignment_pay_rate_beats_role_rate(repos):
    repos.rates.assignments[("proj-1", "escort-1")] = TeamAssignment("proj-1", "escort-1", "talent_escort", Decimal("22.50"))
    svc = RateRuleService(repos.rates, repos.projects)

    rule = svc.rule_for_worker(project_id="proj-1", user_id="escort-1")

    assert rule.rate == Decimal("22.50")
    assert rule.worker_role == WorkerRole.ESCORT


def test_project_break_overrides_global_settings(repos):
    repos.projects._projects["proj-2"] = Project("proj-2", "Night Shoot", None, escort_break_minutes=45)
    repos.rates.settings = GlobalSettings(staff_break_minutes=50)
    svc = RateRuleService(repos.rates, repos.projects)

    escort = svc.load_rate_rule("proj-2", "talent_escort")
    staff = svc.load_rate_rule("proj-2", "coordinator")

    assert escort.default_break_duration == 45
    assert staff.default_break_duration == 50


def test_role_overtime_settings_override_globals(repos):
    repos.rates.role_rates[("proj-1", "coordinator")] = RoleRate(
        "proj-1",
        "coordinator",
        Decimal("25"),
        overtime_threshold_hours=Decimal("10"),
        overtime_multiplier=Decimal("2"),
    )
    svc = RateRuleService(repos.rates, repos.projects)

    rule = svc.load_rate_rule("proj-1", "coordinator")

    assert rule.overtime_threshold_hours == Decimal("10")
    assert rule.overtime_multiplier == Decimal("2")


def test_missing_settings_row_falls_back_to_defaults(repos):
    repos.rates.settings = None
    svc = RateRuleService(repos.rates, repos.projects)

    rule = svc.load_rate_rule("unknown-project", None)

    assert rule.rate == Decimal("0")
    assert rule.max_shift_hours == Decimal("20")
    assert rule.default_break_minutes.escort == 30
