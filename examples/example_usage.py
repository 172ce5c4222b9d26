"""Example: calculate one shift through the service layer (no Flask).

Controllers stay thin; the same call backs POST /api/timecards/calculate.
"""

import importlib
from datetime import date, datetime
from decimal import Decimal

from config import get_settings_module

from src.talent_tracker.talent_tracker.container import build_container
from src.talent_tracker.talent_tracker.timecards.model import TimeEntry


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    entry = TimeEntry(
        work_date=date(2024, 1, 15),
        check_in=datetime(2024, 1, 15, 8, 0),
        break_start=datetime(2024, 1, 15, 12, 0),
        break_end=datetime(2024, 1, 15, 12, 33),
        check_out=datetime(2024, 1, 15, 18, 30),
    )
    result = container.timecard_service.calculate(entry, overrides={"rate": Decimal("20.00")})
    print(result.to_dict())


if __name__ == "__main__":
    main()
