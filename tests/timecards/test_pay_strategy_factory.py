from decimal import Decimal

from src.talent_tracker.talent_tracker.core.enums import TimeType
from src.talent_tracker.talent_tracker.rates.model import RateRule
from src.talent_tracker.talent_tracker.timecards.pay.daily_strategy import DailyPayStrategy
from src.talent_tracker.talent_tracker.timecards.pay.factory import PayStrategyFactory
from src.talent_tracker.talent_tracker.timecards.pay.hourly_strategy import HourlyPayStrategy


def test_factory_picks_hourly_for_hourly_rates():
    strategy = PayStrategyFactory().for_rule(RateRule(rate=Decimal("20")))

    assert isinstance(strategy, HourlyPayStrategy)


def test_factory_picks_daily_for_day_rates():
    strategy = PayStrategyFactory().for_rule(RateRule(rate=Decimal("300"), time_type=TimeType.DAILY))

    assert isinstance(strategy, DailyPayStrategy)


def test_hourly_strategy_respects_custom_threshold_and_multiplier():
    rule = RateRule(rate=Decimal("10"), overtime_threshold_hours=Decimal("10"), overtime_multiplier=Decimal("2"))

    assert HourlyPayStrategy().pay(Decimal("12"), rule) == Decimal("140.00")
    assert HourlyPayStrategy().pay(Decimal("10"), rule) == Decimal("100.00")
