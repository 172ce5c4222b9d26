from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..common.decimal_utils import ZERO, round2
from ..core import constants
from ..core.enums import TimeType
from ..rates.model import RateRule
from .hours import effective_break_minutes, worked_hours
from .model import CalculationResult, TimeEntry
from .pay.factory import PayStrategyFactory
from .validation import shift_length_issues, validate_sequence


class TimecardCalculator:
    """Turn one day's timestamps plus a RateRule into hours, break and pay.

    Pure: no I/O and no configuration beyond the rule passed in.
    """

    def __init__(self, *, strategy_factory: Optional[PayStrategyFactory] = None):
        self._factory = strategy_factory or PayStrategyFactory()

    def calculate(self, entry: TimeEntry, rule: RateRule) -> CalculationResult:
        sequence_issues = validate_sequence(entry)
        if sequence_issues:
            return CalculationResult.empty(errors=tuple(dict.fromkeys(i.code for i in sequence_issues)))

        if entry.check_out is None:
            # Shift still in progress: incomplete, not broken.
            return CalculationResult.empty()

        hours = worked_hours(entry, rule)
        break_minutes = round2(effective_break_minutes(entry, rule))
        pay = self._factory.for_rule(rule).pay(hours, rule)

        issues = shift_length_issues(hours, rule)
        errors = tuple(i.code for i in issues if i.blocking)
        warnings = tuple(i.code for i in issues if not i.blocking)

        return CalculationResult(
            total_hours=hours,
            break_minutes=break_minutes,
            total_pay=pay,
            is_valid=not errors,
            validation_errors=errors,
            warnings=warnings,
        )

    def apply(self, entry: TimeEntry, rule: RateRule) -> tuple[TimeEntry, CalculationResult]:
        """Calculate and copy the totals onto the entry."""
        result = self.calculate(entry, rule)
        updated = replace(
            entry,
            hours_worked=result.total_hours,
            break_minutes=result.break_minutes,
            daily_pay=result.total_pay,
        )
        return updated, result


def detect_manual_edit(previous: TimeEntry, result: CalculationResult, rule: RateRule) -> bool:
    """Flag recalculations that moved stored values more than ~15 minutes' worth."""
    threshold = rule.manual_edit_threshold_hours
    hours_delta = abs(result.total_hours - previous.hours_worked)
    break_delta = abs(result.break_minutes - previous.break_minutes)
    pay_delta = abs(result.total_pay - previous.daily_pay)

    if hours_delta > threshold or break_delta > constants.MANUAL_EDIT_BREAK_THRESHOLD_MINUTES:
        return True
    if rule.time_type == TimeType.HOURLY and rule.rate > ZERO:
        return pay_delta > round2(threshold * rule.rate * rule.overtime_multiplier)
    return False


_default_calculator = TimecardCalculator()


def calculate(entry: TimeEntry, rule: RateRule) -> CalculationResult:
    return _default_calculator.calculate(entry, rule)
