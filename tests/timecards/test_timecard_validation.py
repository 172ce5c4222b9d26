from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from src.talent_tracker.talent_tracker.core.enums import WorkerRole
from src.talent_tracker.talent_tracker.rates.model import RateRule
from src.talent_tracker.talent_tracker.timecards.model import TimeEntry
from src.talent_tracker.talent_tracker.timecards.validation import (
    blocking,
    validate_missing_break,
    validate_sequence,
    validate_shift_length,
    validate_submission_timing,
)

DAY = date(2024, 1, 15)
RULE = RateRule(rate=Decimal("20"), worker_role=WorkerRole.ESCORT)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 15, hour, minute)


def test_valid_sequence_has_no_issues():
    entry = TimeEntry(DAY, at(8), check_out=at(17), break_start=at(12), break_end=at(12, 30))

    assert validate_sequence(entry) == []


def test_break_before_check_in_is_rejected():
    entry = TimeEntry(DAY, at(8), check_out=at(17), break_start=at(7, 30), break_end=at(8, 30))

    codes = [i.code for i in validate_sequence(entry)]

    assert codes == ["invalid-break-window"]


def test_shift_length_warning_is_not_blocking():
    entry = TimeEntry(DAY, at(6), check_out=at(19))

    issues = validate_shift_length(entry, RULE)

    assert [i.code for i in issues] == ["overtime-warning"]
    assert blocking(issues) == []


def test_missing_break_flagged_for_long_shift_without_break():
    assert validate_missing_break(TimeEntry(DAY, at(8), check_out=at(15)), RULE)


def test_missing_break_not_flagged_for_short_shift():
    assert not validate_missing_break(TimeEntry(DAY, at(8), check_out=at(14)), RULE)


def test_missing_break_not_flagged_when_break_recorded_or_declined():
    with_break = TimeEntry(DAY, at(8), check_out=at(17), break_start=at(12), break_end=at(12, 30))
    declined = TimeEntry(DAY, at(8), check_out=at(17), no_break_acknowledged=True)

    assert not validate_missing_break(with_break, RULE)
    assert not validate_missing_break(declined, RULE)


def test_submission_opens_on_project_start_date():
    start = date(2024, 1, 15)

    assert not validate_submission_timing(start, today=date(2024, 1, 14))
    assert validate_submission_timing(start, today=start)
    assert validate_submission_timing(start, today=date(2024, 1, 14), enforce=False)
    assert validate_submission_timing(None, today=date(2024, 1, 14))
