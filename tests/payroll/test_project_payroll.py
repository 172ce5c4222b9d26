from __future__ import annotations

from datetime import date, datetime

import pytest

from src.talent_tracker.talent_tracker.core.enums import TimecardStatus
from src.talent_tracker.talent_tracker.core.exceptions import AuthorizationError, NotFoundError
from src.talent_tracker.talent_tracker.timecards.model import TimeEntry


def shift(day: int, start: int, end: int) -> TimeEntry:
    d = date(2024, 1, day)
    return TimeEntry(d, datetime(2024, 1, day, start), check_out=datetime(2024, 1, day, end))


def seed(container):
    svc = container.timecard_service
    first = svc.create_timecard(actor_id="escort-1", project_id="proj-1", entries=[shift(15, 8, 14)])
    second = svc.create_timecard(actor_id="escort-1", project_id="proj-1", entries=[shift(16, 8, 12)])
    other = svc.create_timecard(actor_id="escort-2", project_id="proj-1", entries=[shift(15, 9, 11)])
    svc.submit(actor_id="escort-1", timecard_id=first.timecard_id)
    return first, second, other


def test_summary_totals_per_worker(container):
    seed(container)

    report = container.payroll_report_service.build_project_summary(project_id="proj-1", actor_can_approve=True)

    assert len(report.rows) == 3
    assert report.summary[0] == {
        "user_id": "escort-1",
        "full_name": "Erin Escort",
        "timecards": 2,
        "total_hours": "10.00",
        "total_pay": "200.00",
    }
    assert report.summary[1]["total_pay"] == "40.00"


def test_summary_filters_by_status(container):
    first, _, _ = seed(container)

    report = container.payroll_report_service.build_project_summary(
        project_id="proj-1",
        actor_can_approve=True,
        status=TimecardStatus.SUBMITTED,
    )

    assert [r["timecard_id"] for r in report.rows] == [first.timecard_id]
    assert report.rows[0]["period_start_date"] == "2024-01-15"
    assert report.rows[0]["total_hours"] == "6.00"


def test_summary_needs_approval_rights(container):
    with pytest.raises(AuthorizationError):
        container.payroll_report_service.build_project_summary(project_id="proj-1", actor_can_approve=False)


def test_summary_unknown_project(container):
    with pytest.raises(NotFoundError):
        container.payroll_report_service.build_project_summary(project_id="nope", actor_can_approve=True)


def test_row_limit_does_not_shrink_worker_totals(container):
    seed(container)

    report = container.payroll_report_service.build_project_summary(
        project_id="proj-1",
        actor_can_approve=True,
        row_limit=1,
    )

    assert report.truncated
    assert len(report.rows) == 1
    assert report.summary[0]["timecards"] == 2
    assert report.summary[0]["total_pay"] == "200.00"
    assert report.summary[1]["total_pay"] == "40.00"


def test_full_listing_is_not_truncated(container):
    seed(container)

    report = container.payroll_report_service.build_project_summary(
        project_id="proj-1",
        actor_can_approve=True,
        row_limit=None,
    )

    assert not report.truncated
    assert len(report.rows) == 3
