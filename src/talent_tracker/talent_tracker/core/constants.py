"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Project-wide values stored in `system_settings` override these at runtime.
"""

from decimal import Decimal

DEFAULT_ESCORT_BREAK_MINUTES = 30
DEFAULT_STAFF_BREAK_MINUTES = 60
DEFAULT_BREAK_GRACE_MINUTES = 5

DEFAULT_OVERTIME_THRESHOLD_HOURS = Decimal("8")
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")
DEFAULT_OVERTIME_WARNING_HOURS = Decimal("12")
DEFAULT_MAX_SHIFT_HOURS = Decimal("20")
DEFAULT_MISSING_BREAK_THRESHOLD_HOURS = Decimal("6")

# 15 minutes
DEFAULT_MANUAL_EDIT_THRESHOLD_HOURS = Decimal("0.25")
MANUAL_EDIT_BREAK_THRESHOLD_MINUTES = Decimal("15")

DEFAULT_AUDIT_LIMIT = 50
DEFAULT_REPORT_LIMIT = 500
