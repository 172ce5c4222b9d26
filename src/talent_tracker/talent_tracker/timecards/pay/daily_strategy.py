from __future__ import annotations

from decimal import Decimal

from ...common.decimal_utils import round2
from ...rates.model import RateRule
from .base import PayStrategy


class DailyPayStrategy(PayStrategy):
    """Flat day rate regardless of hours worked."""

    def pay(self, hours: Decimal, rule: RateRule) -> Decimal:
        return round2(rule.rate)
