from __future__ import annotations

from ..core.enums import AuditActionType, TimecardStatus, ValidationCode
from ..core.exceptions import AuthorizationError, ValidationError

ALLOWED_TRANSITIONS: dict[TimecardStatus, frozenset[TimecardStatus]] = {
    TimecardStatus.DRAFT: frozenset({TimecardStatus.SUBMITTED}),
    TimecardStatus.EDITED_DRAFT: frozenset({TimecardStatus.SUBMITTED}),
    TimecardStatus.SUBMITTED: frozenset(
        {TimecardStatus.APPROVED, TimecardStatus.REJECTED, TimecardStatus.EDITED_DRAFT}
    ),
    TimecardStatus.REJECTED: frozenset({TimecardStatus.SUBMITTED, TimecardStatus.DRAFT}),
    TimecardStatus.APPROVED: frozenset(),
}

OWNER_EDITABLE_STATUSES = frozenset({TimecardStatus.DRAFT, TimecardStatus.EDITED_DRAFT, TimecardStatus.REJECTED})
APPROVER_EDITABLE_STATUSES = OWNER_EDITABLE_STATUSES | {TimecardStatus.SUBMITTED}


def can_transition(current: TimecardStatus, target: TimecardStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: TimecardStatus, target: TimecardStatus) -> None:
    if not can_transition(current, target):
        raise ValidationError(
            f"Timecard cannot move from {current.value} to {target.value}",
            code=ValidationCode.INVALID_STATUS.value,
            details={"status": current.value, "target": target.value},
        )


def classify_action(
    *,
    actor_id: str,
    owner_id: str,
    actor_can_approve: bool,
    is_return_to_draft: bool,
) -> AuditActionType:
    """Single place deciding which audit action an edit is."""
    if is_return_to_draft:
        if not actor_can_approve:
            raise AuthorizationError("Insufficient permissions to return timecard to draft")
        return AuditActionType.REJECTION_EDIT
    if actor_id == owner_id:
        return AuditActionType.USER_EDIT
    if actor_can_approve:
        return AuditActionType.ADMIN_EDIT
    raise AuthorizationError("Insufficient permissions to edit this timecard")


def ensure_editable(status: TimecardStatus, action: AuditActionType) -> None:
    allowed = OWNER_EDITABLE_STATUSES if action == AuditActionType.USER_EDIT else APPROVER_EDITABLE_STATUSES
    if status not in allowed:
        raise ValidationError(
            f"Timecard in status {status.value} cannot be edited",
            code=ValidationCode.INVALID_STATUS.value,
            details={"status": status.value},
        )
