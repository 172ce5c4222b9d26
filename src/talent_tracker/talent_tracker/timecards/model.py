from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import format_iso
from ..common.decimal_utils import ZERO
from ..core.enums import TimecardStatus


@dataclass(frozen=True)
class TimeEntry:
    """One work day inside a timecard.

    hours_worked / break_minutes / daily_pay hold the last stored calculation.
    """

    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    no_break_acknowledged: bool = False
    shift_limit_overridden: bool = False
    hours_worked: Decimal = ZERO
    break_minutes: Decimal = ZERO
    daily_pay: Decimal = ZERO
    entry_id: Optional[str] = None

    @property
    def has_break_data(self) -> bool:
        return self.break_start is not None or self.break_end is not None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "work_date": self.work_date.isoformat(),
            "check_in_time": format_iso(self.check_in),
            "check_out_time": format_iso(self.check_out),
            "break_start_time": format_iso(self.break_start),
            "break_end_time": format_iso(self.break_end),
            "no_break_acknowledged": self.no_break_acknowledged,
            "shift_limit_overridden": self.shift_limit_overridden,
            "hours_worked": float(self.hours_worked),
            "break_duration": float(self.break_minutes),
            "daily_pay": float(self.daily_pay),
        }


@dataclass(frozen=True)
class CalculationResult:
    total_hours: Decimal
    break_minutes: Decimal
    total_pay: Decimal
    is_valid: bool
    validation_errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def empty(cls, *, errors: tuple[str, ...] = ()) -> "CalculationResult":
        return cls(total_hours=ZERO, break_minutes=ZERO, total_pay=ZERO, is_valid=False, validation_errors=errors)

    def to_dict(self) -> dict:
        return {
            "total_hours": float(self.total_hours),
            "break_duration": float(self.break_minutes),
            "total_pay": float(self.total_pay),
            "is_valid": self.is_valid,
            "validation_errors": list(self.validation_errors),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class Timecard:
    """Approvable record of one worker's days on one project."""

    timecard_id: str
    user_id: str
    project_id: str
    status: TimecardStatus
    entries: tuple[TimeEntry, ...]
    pay_rate: Decimal = ZERO
    total_hours: Decimal = ZERO
    total_break_minutes: Decimal = ZERO
    total_pay: Decimal = ZERO
    manually_edited: bool = False
    admin_edited: bool = False
    edit_type: Optional[str] = None
    edit_comments: Optional[str] = None
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    rejected_fields: tuple[str, ...] = ()
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    last_edited_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    @property
    def period_start_date(self) -> Optional[date]:
        return min((e.work_date for e in self.entries), default=None)

    @property
    def period_end_date(self) -> Optional[date]:
        return max((e.work_date for e in self.entries), default=None)

    def entry_for(self, work_date: date) -> Optional[TimeEntry]:
        for e in self.entries:
            if e.work_date == work_date:
                return e
        return None

    def with_entries(self, entries) -> "Timecard":
        entries = tuple(sorted(entries, key=lambda e: e.work_date))
        return replace(
            self,
            entries=entries,
            total_hours=sum((e.hours_worked for e in entries), ZERO),
            total_break_minutes=sum((e.break_minutes for e in entries), ZERO),
            total_pay=sum((e.daily_pay for e in entries), ZERO),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.timecard_id,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "status": self.status.value,
            "period_start_date": self.period_start_date.isoformat() if self.period_start_date else None,
            "period_end_date": self.period_end_date.isoformat() if self.period_end_date else None,
            "pay_rate": float(self.pay_rate),
            "total_hours": float(self.total_hours),
            "total_break_duration": float(self.total_break_minutes),
            "total_pay": float(self.total_pay),
            "manually_edited": self.manually_edited,
            "admin_edited": self.admin_edited,
            "edit_type": self.edit_type,
            "edit_comments": self.edit_comments,
            "admin_notes": self.admin_notes,
            "rejection_reason": self.rejection_reason,
            "rejected_fields": list(self.rejected_fields),
            "submitted_at": format_iso(self.submitted_at),
            "approved_at": format_iso(self.approved_at),
            "approved_by": self.approved_by,
            "last_edited_by": self.last_edited_by,
            "version": self.version,
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True)
class TimecardReportRow:
    """Read-model for payroll summaries (joined with the worker profile)."""

    timecard_id: str
    user_id: str
    full_name: str
    status: TimecardStatus
    period_start_date: Optional[date]
    period_end_date: Optional[date]
    total_hours: Decimal
    total_break_minutes: Decimal
    total_pay: Decimal
    manually_edited: bool = False
