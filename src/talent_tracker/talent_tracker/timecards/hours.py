"""Minute/hour arithmetic shared by the calculator and the validators."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ..common.decimal_utils import ZERO, round2
from ..rates.model import RateRule
from .model import TimeEntry

SIXTY = Decimal("60")


def minutes_between(start: datetime, end: datetime) -> Decimal:
    return Decimal(str((end - start).total_seconds())) / SIXTY


def apply_break_grace_period(actual_minutes: Decimal, default_minutes: int, grace_minutes: int) -> Decimal:
    """Snap a break that overran the default by at most `grace_minutes` back to the default.

    Breaks shorter than the default are counted as taken.
    """

    default_d = Decimal(default_minutes)
    overrun = actual_minutes - default_d
    if ZERO <= overrun <= Decimal(grace_minutes):
        return default_d
    return actual_minutes


def effective_break_minutes(entry: TimeEntry, rule: RateRule) -> Decimal:
    if entry.break_start is None or entry.break_end is None:
        return ZERO
    actual = minutes_between(entry.break_start, entry.break_end)
    return apply_break_grace_period(actual, rule.default_break_duration, rule.break_grace_period_minutes)


def worked_minutes(entry: TimeEntry, rule: RateRule) -> Decimal:
    if entry.check_in is None or entry.check_out is None:
        return ZERO
    raw = minutes_between(entry.check_in, entry.check_out)
    return max(raw - effective_break_minutes(entry, rule), ZERO)


def worked_hours(entry: TimeEntry, rule: RateRule) -> Decimal:
    return round2(worked_minutes(entry, rule) / SIXTY)
