from __future__ import annotations

import pytest

from src.talent_tracker.talent_tracker.core.enums import AuditActionType, TimecardStatus
from src.talent_tracker.talent_tracker.core.exceptions import AuthorizationError, ValidationError
from src.talent_tracker.talent_tracker.timecards.status import (
    can_transition,
    classify_action,
    ensure_editable,
    ensure_transition,
)


@pytest.mark.parametrize(
    "current,target",
    [
        (TimecardStatus.DRAFT, TimecardStatus.SUBMITTED),
        (TimecardStatus.EDITED_DRAFT, TimecardStatus.SUBMITTED),
        (TimecardStatus.SUBMITTED, TimecardStatus.APPROVED),
        (TimecardStatus.SUBMITTED, TimecardStatus.REJECTED),
        (TimecardStatus.SUBMITTED, TimecardStatus.EDITED_DRAFT),
        (TimecardStatus.REJECTED, TimecardStatus.SUBMITTED),
        (TimecardStatus.REJECTED, TimecardStatus.DRAFT),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


def test_approved_is_terminal():
    for target in TimecardStatus:
        assert not can_transition(TimecardStatus.APPROVED, target)


def test_draft_cannot_be_approved_directly():
    with pytest.raises(ValidationError) as exc:
        ensure_transition(TimecardStatus.DRAFT, TimecardStatus.APPROVED)

    assert exc.value.code == "invalid-status"


def test_owner_edit_is_user_edit():
    action = classify_action(actor_id="u1", owner_id="u1", actor_can_approve=False, is_return_to_draft=False)

    assert action == AuditActionType.USER_EDIT


def test_approver_editing_someone_else_is_admin_edit():
    action = classify_action(actor_id="a1", owner_id="u1", actor_can_approve=True, is_return_to_draft=False)

    assert action == AuditActionType.ADMIN_EDIT


def test_return_to_draft_is_rejection_edit_even_for_own_timecard():
    action = classify_action(actor_id="a1", owner_id="a1", actor_can_approve=True, is_return_to_draft=True)

    assert action == AuditActionType.REJECTION_EDIT


def test_non_owner_without_rights_is_refused():
    with pytest.raises(AuthorizationError):
        classify_action(actor_id="u2", owner_id="u1", actor_can_approve=False, is_return_to_draft=False)

    with pytest.raises(AuthorizationError):
        classify_action(actor_id="u1", owner_id="u1", actor_can_approve=False, is_return_to_draft=True)


def test_owner_cannot_edit_submitted_timecard_but_approver_can():
    with pytest.raises(ValidationError):
        ensure_editable(TimecardStatus.SUBMITTED, AuditActionType.USER_EDIT)

    ensure_editable(TimecardStatus.SUBMITTED, AuditActionType.ADMIN_EDIT)

    with pytest.raises(ValidationError):
        ensure_editable(TimecardStatus.APPROVED, AuditActionType.ADMIN_EDIT)
