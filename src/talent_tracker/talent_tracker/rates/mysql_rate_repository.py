from __future__ import annotations

from typing import Optional

from ..common.decimal_utils import to_decimal
from ..core.enums import TimeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import GlobalSettings, RoleRate, TeamAssignment
from .repository import RateRepository


def _opt_decimal(value):
    return None if value is None else to_decimal(value)


class MySQLRateRepository(RateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_global_settings(self) -> Optional[GlobalSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT escort_break_minutes, staff_break_minutes, break_grace_minutes,
                       max_shift_hours, overtime_warning_hours, overtime_threshold_hours,
                       overtime_multiplier, submission_opens_on_start_date,
                       in_house_can_approve_timecards, supervisor_can_approve_timecards,
                       coordinator_can_approve_timecards
                FROM system_settings
                ORDER BY id
                LIMIT 1
                """
            )
            r = fetchone(cur)
            if not r:
                return None
            return GlobalSettings(
                escort_break_minutes=int(r["escort_break_minutes"]),
                staff_break_minutes=int(r["staff_break_minutes"]),
                break_grace_minutes=int(r["break_grace_minutes"]),
                max_shift_hours=to_decimal(r["max_shift_hours"]),
                overtime_warning_hours=to_decimal(r["overtime_warning_hours"]),
                overtime_threshold_hours=to_decimal(r["overtime_threshold_hours"]),
                overtime_multiplier=to_decimal(r["overtime_multiplier"]),
                submission_opens_on_start_date=bool(r["submission_opens_on_start_date"]),
                in_house_can_approve_timecards=bool(r["in_house_can_approve_timecards"]),
                supervisor_can_approve_timecards=bool(r["supervisor_can_approve_timecards"]),
                coordinator_can_approve_timecards=bool(r["coordinator_can_approve_timecards"]),
            )

    def get_role_rate(self, *, project_id: str, role: str) -> Optional[RoleRate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT project_id, role, base_pay_rate, time_type,
                       overtime_threshold_hours, overtime_multiplier
                FROM project_role_rates
                WHERE project_id=%s AND role=%s
                """,
                (project_id, role),
            )
            r = fetchone(cur)
            if not r:
                return None
            return RoleRate(
                project_id=r["project_id"],
                role=r["role"],
                base_pay_rate=to_decimal(r["base_pay_rate"]),
                time_type=TimeType(r["time_type"]),
                overtime_threshold_hours=_opt_decimal(r.get("overtime_threshold_hours")),
                overtime_multiplier=_opt_decimal(r.get("overtime_multiplier")),
            )

    def get_assignment(self, *, project_id: str, user_id: str) -> Optional[TeamAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT project_id, user_id, role, pay_rate
                FROM team_assignments
                WHERE project_id=%s AND user_id=%s
                """,
                (project_id, user_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return TeamAssignment(
                project_id=r["project_id"],
                user_id=r["user_id"],
                role=r["role"],
                pay_rate=_opt_decimal(r.get("pay_rate")),
            )
