from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.decimal_utils import ZERO, round2
from ..core import constants
from ..core.enums import TimecardStatus
from ..core.exceptions import AuthorizationError, NotFoundError
from ..projects.repository import ProjectRepository
from ..timecards.repository import TimecardRepository

CSV_FIELDS = [
    "timecard_id",
    "user_id",
    "full_name",
    "status",
    "period_start_date",
    "period_end_date",
    "total_hours",
    "total_break_duration",
    "total_pay",
    "manually_edited",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
    truncated: bool = False


class PayrollReportService:
    def __init__(self, timecards: TimecardRepository, projects: ProjectRepository):
        self._timecards = timecards
        self._projects = projects

    def build_project_summary(
        self,
        *,
        project_id: str,
        actor_can_approve: bool,
        status: Optional[TimecardStatus] = None,
        row_limit: Optional[int] = constants.DEFAULT_REPORT_LIMIT,
    ) -> ReportData:
        """Per-timecard rows plus one total per worker, highest pay first.

        Worker totals always cover every matching timecard; `row_limit` only
        caps the listed rows (None lists them all).
        """
        if not actor_can_approve:
            raise AuthorizationError("Insufficient permissions to view payroll")
        if not self._projects.get_by_id(project_id):
            raise NotFoundError(f"Project {project_id} not found")

        query_rows = self._timecards.list_report_rows(project_id=project_id, status=status)

        out_rows: list[dict] = []
        summary_map: dict[str, dict] = {}
        for r in query_rows:
            out_rows.append(
                {
                    "timecard_id": r.timecard_id,
                    "user_id": r.user_id,
                    "full_name": r.full_name,
                    "status": r.status.value,
                    "period_start_date": r.period_start_date.isoformat() if r.period_start_date else "",
                    "period_end_date": r.period_end_date.isoformat() if r.period_end_date else "",
                    "total_hours": f"{round2(r.total_hours):.2f}",
                    "total_break_duration": f"{round2(r.total_break_minutes):.2f}",
                    "total_pay": f"{round2(r.total_pay):.2f}",
                    "manually_edited": "yes" if r.manually_edited else "no",
                }
            )

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "full_name": r.full_name,
                    "timecards": 0,
                    "total_hours": ZERO,
                    "total_pay": ZERO,
                }
                summary_map[r.user_id] = s
            s["timecards"] += 1
            s["total_hours"] += r.total_hours
            s["total_pay"] += r.total_pay

        summary = [
            {
                "user_id": s["user_id"],
                "full_name": s["full_name"],
                "timecards": s["timecards"],
                "total_hours": f"{round2(s['total_hours']):.2f}",
                "total_pay": f"{round2(s['total_pay']):.2f}",
            }
            for s in sorted(summary_map.values(), key=lambda x: x["total_pay"], reverse=True)
        ]
        truncated = row_limit is not None and len(out_rows) > row_limit
        if truncated:
            out_rows = out_rows[:row_limit]
        return ReportData(rows=out_rows, summary=summary, truncated=truncated)
