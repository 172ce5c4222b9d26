from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

from ..common.decimal_utils import ZERO
from ..core.enums import BreakResolution, ValidationCode
from ..core.exceptions import ValidationError
from ..rates.model import RateRule
from .calculator import TimecardCalculator
from .model import TimeEntry


def add_default_break(entry: TimeEntry, rule: RateRule, calculator: TimecardCalculator) -> TimeEntry:
    """Insert a default-length break centred in the shift, then recalculate."""
    if entry.check_in is None or entry.check_out is None:
        raise ValidationError(
            f"Cannot add a break to an incomplete shift on {entry.work_date.isoformat()}",
            code=ValidationCode.INVALID_REQUEST.value,
        )

    duration = timedelta(minutes=rule.default_break_duration)
    midpoint = entry.check_in + (entry.check_out - entry.check_in) / 2
    break_start = midpoint - duration / 2
    updated = replace(
        entry,
        break_start=break_start,
        break_end=break_start + duration,
        no_break_acknowledged=False,
    )
    updated, _ = calculator.apply(updated, rule)
    return updated


def acknowledge_no_break(entry: TimeEntry) -> TimeEntry:
    """Record 'no break taken': zero break, hours and pay left as they are."""
    return replace(entry, break_start=None, break_end=None, break_minutes=ZERO, no_break_acknowledged=True)


def resolve_missing_break(
    entry: TimeEntry,
    resolution: BreakResolution,
    rule: RateRule,
    calculator: TimecardCalculator,
) -> TimeEntry:
    if resolution == BreakResolution.ADD_BREAK:
        return add_default_break(entry, rule, calculator)
    return acknowledge_no_break(entry)
