from __future__ import annotations

from decimal import Decimal

from ...common.decimal_utils import round2
from ...rates.model import RateRule
from .base import PayStrategy


class HourlyPayStrategy(PayStrategy):
    """Regular rate up to the overtime threshold, multiplied rate above it."""

    def pay(self, hours: Decimal, rule: RateRule) -> Decimal:
        threshold = rule.overtime_threshold_hours
        if hours <= threshold:
            return round2(hours * rule.rate)
        overtime_hours = hours - threshold
        return round2(threshold * rule.rate + overtime_hours * rule.rate * rule.overtime_multiplier)
