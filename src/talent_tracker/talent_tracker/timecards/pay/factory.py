from __future__ import annotations

from dataclasses import dataclass

from ...core.enums import TimeType
from ...rates.model import RateRule
from .base import PayStrategy
from .daily_strategy import DailyPayStrategy
from .hourly_strategy import HourlyPayStrategy


@dataclass
class PayStrategyFactory:
    """Factory Pattern: choose the pay strategy for a rate rule."""

    def for_rule(self, rule: RateRule) -> PayStrategy:
        if rule.time_type == TimeType.DAILY:
            return DailyPayStrategy()
        return HourlyPayStrategy()
