from __future__ import annotations

from dataclasses import dataclass

from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditLogService
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .payroll.service import PayrollReportService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .rates.mysql_rate_repository import MySQLRateRepository
from .rates.repository import RateRepository
from .rates.service import RateRuleService
from .timecards.calculator import TimecardCalculator
from .timecards.mysql_timecard_repository import MySQLTimecardRepository
from .timecards.pay.factory import PayStrategyFactory
from .timecards.repository import TimecardRepository
from .timecards.service import TimecardService
from .users.mysql_profile_repository import MySQLProfileRepository
from .users.repository import ProfileRepository


@dataclass(frozen=True)
class Container:
    profiles_repo: ProfileRepository
    projects_repo: ProjectRepository
    rates_repo: RateRepository
    timecards_repo: TimecardRepository
    audit_repo: AuditRepository

    rate_rule_service: RateRuleService
    audit_service: AuditLogService
    timecard_service: TimecardService
    payroll_report_service: PayrollReportService


def assemble(
    *,
    profiles_repo: ProfileRepository,
    projects_repo: ProjectRepository,
    rates_repo: RateRepository,
    timecards_repo: TimecardRepository,
    audit_repo: AuditRepository,
    **service_options,
) -> Container:
    """Wire services on top of any set of repositories (MySQL or in-memory)."""
    rate_rule_service = RateRuleService(rates_repo, projects_repo)
    audit_service = AuditLogService(audit_repo, clock=service_options.get("clock", now_local))
    timecard_service = TimecardService(
        timecards_repo,
        profiles_repo,
        projects_repo,
        rate_rule_service,
        audit_service,
        calculator=TimecardCalculator(strategy_factory=PayStrategyFactory()),
        **service_options,
    )
    payroll_report_service = PayrollReportService(timecards_repo, projects_repo)

    return Container(
        profiles_repo=profiles_repo,
        projects_repo=projects_repo,
        rates_repo=rates_repo,
        timecards_repo=timecards_repo,
        audit_repo=audit_repo,
        rate_rule_service=rate_rule_service,
        audit_service=audit_service,
        timecard_service=timecard_service,
        payroll_report_service=payroll_report_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    return assemble(
        profiles_repo=MySQLProfileRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        rates_repo=MySQLRateRepository(conn),
        timecards_repo=MySQLTimecardRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
    )
