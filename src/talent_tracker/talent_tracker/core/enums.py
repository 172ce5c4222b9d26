from __future__ import annotations

from enum import Enum


class SystemRole(str, Enum):
    """System-wide role stored on the user profile."""

    ADMIN = "admin"
    IN_HOUSE = "in_house"
    SUPERVISOR = "supervisor"
    COORDINATOR = "coordinator"
    TALENT_ESCORT = "talent_escort"


class WorkerRole(str, Enum):
    """Which default break duration applies to a worker."""

    ESCORT = "escort"
    STAFF = "staff"


class TimeType(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"


class TimecardStatus(str, Enum):
    """Timecard lifecycle states.

    EDITED_DRAFT is a draft returned by an approver with corrections.
    """

    DRAFT = "draft"
    EDITED_DRAFT = "edited_draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditActionType(str, Enum):
    USER_EDIT = "user_edit"
    ADMIN_EDIT = "admin_edit"
    REJECTION_EDIT = "rejection_edit"
    STATUS_CHANGE = "status_change"


class BreakResolution(str, Enum):
    ADD_BREAK = "add_break"
    NO_BREAK = "no_break"


class ValidationCode(str, Enum):
    """Machine-readable codes attached to validation failures."""

    MISSING_CHECK_IN = "missing-check-in"
    INCOMPLETE_SHIFT = "incomplete-shift"
    CHECKOUT_BEFORE_CHECKIN = "checkout-before-checkin"
    INVALID_BREAK_WINDOW = "invalid-break-window"
    SHIFT_EXCEEDS_MAX = "shift-exceeds-max"
    OVERTIME_WARNING = "overtime-warning"
    MISSING_BREAK_UNRESOLVED = "missing-break-unresolved"
    SUBMISSION_NOT_OPEN = "submission-not-open"
    REASON_REQUIRED = "reason-required"
    INVALID_STATUS = "invalid-status"
    INVALID_REQUEST = "invalid-request"
