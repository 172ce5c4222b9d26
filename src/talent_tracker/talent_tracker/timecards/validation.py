from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import ValidationCode
from ..rates.model import RateRule
from .hours import worked_hours
from .model import TimeEntry


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    blocking: bool = True


def validate_sequence(entry: TimeEntry) -> list[ValidationIssue]:
    """Check-in / break / check-out ordering.

    A lone break start is an in-progress break and is allowed; a break end
    without a start is not.
    """

    issues: list[ValidationIssue] = []
    check_in = entry.check_in
    if check_in is None:
        return [ValidationIssue(ValidationCode.MISSING_CHECK_IN.value, "Check-in time is required")]

    if entry.check_out is not None and entry.check_out <= check_in:
        issues.append(
            ValidationIssue(
                ValidationCode.CHECKOUT_BEFORE_CHECKIN.value,
                "Check-out time must be after check-in time",
            )
        )

    break_errors: list[str] = []
    if entry.break_end is not None and entry.break_start is None:
        break_errors.append("Break end time requires a break start time")
    if entry.break_start is not None:
        if entry.break_start <= check_in:
            break_errors.append("Break start time must be after check-in time")
        if entry.break_end is not None:
            if entry.break_end <= entry.break_start:
                break_errors.append("Break end time must be after break start time")
            if entry.check_out is not None and entry.break_end > entry.check_out:
                break_errors.append("Break end time must be before check-out time")

    for message in break_errors:
        issues.append(ValidationIssue(ValidationCode.INVALID_BREAK_WINDOW.value, message))
    return issues


def shift_length_issues(total_hours: Decimal, rule: RateRule) -> list[ValidationIssue]:
    if total_hours > rule.max_shift_hours:
        return [
            ValidationIssue(
                ValidationCode.SHIFT_EXCEEDS_MAX.value,
                f"Shift exceeds {rule.max_shift_hours}-hour limit - requires manual review",
            )
        ]
    if total_hours > rule.overtime_warning_hours:
        return [
            ValidationIssue(
                ValidationCode.OVERTIME_WARNING.value,
                f"Shift is longer than {rule.overtime_warning_hours} hours",
                blocking=False,
            )
        ]
    return []


def validate_shift_length(entry: TimeEntry, rule: RateRule) -> list[ValidationIssue]:
    return shift_length_issues(worked_hours(entry, rule), rule)


def validate_missing_break(entry: TimeEntry, rule: RateRule) -> bool:
    """True when a long shift has no break data and no recorded 'no break' decision."""
    if entry.has_break_data or entry.no_break_acknowledged:
        return False
    return worked_hours(entry, rule) > rule.missing_break_threshold_hours


def validate_submission_timing(
    project_start_date: Optional[date],
    *,
    today: date,
    enforce: bool = True,
) -> bool:
    """Submission opens on the production start day."""
    if not enforce or project_start_date is None:
        return True
    return today >= project_start_date


def blocking(issues: list[ValidationIssue]) -> list[ValidationIssue]:
    return [i for i in issues if i.blocking]
