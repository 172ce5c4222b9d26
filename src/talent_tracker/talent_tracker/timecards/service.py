from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Mapping, Optional, Sequence

from ..audit.model import FieldChange
from ..audit.service import HEADER_FIELDS, AuditLogService, detect_changes, entry_changes
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.enums import AuditActionType, BreakResolution, TimecardStatus, ValidationCode
from ..core.exceptions import (
    AuditLogError,
    AuthorizationError,
    ConcurrencyError,
    NotFoundError,
    ValidationError,
)
from ..projects.repository import ProjectRepository
from ..rates.model import RateRule
from ..rates.service import RateRuleService
from ..users.model import Profile
from ..users.permissions import can_approve_timecards
from ..users.repository import ProfileRepository
from .calculator import TimecardCalculator, detect_manual_edit
from .model import CalculationResult, TimeEntry, Timecard
from .repository import TimecardRepository
from .resolutions import resolve_missing_break
from .status import classify_action, ensure_editable, ensure_transition
from .validation import validate_missing_break, validate_sequence, validate_submission_timing

logger = logging.getLogger(__name__)

RULE_OVERRIDE_FIELDS = frozenset(
    {
        "rate",
        "time_type",
        "overtime_threshold_hours",
        "overtime_multiplier",
        "worker_role",
        "break_grace_period_minutes",
    }
)


@dataclass(frozen=True)
class EditResult:
    timecard: Timecard
    changes: tuple[FieldChange, ...]
    change_id: Optional[str]


@dataclass(frozen=True)
class MissingBreak:
    timecard_id: str
    work_date: date
    hours_worked: Decimal

    def to_dict(self) -> dict:
        return {
            "timecard_id": self.timecard_id,
            "work_date": self.work_date.isoformat(),
            "hours_worked": float(self.hours_worked),
        }


@dataclass(frozen=True)
class SubmissionCheck:
    can_submit: bool
    errors: tuple[str, ...] = ()
    missing_breaks: tuple[MissingBreak, ...] = ()

    def to_dict(self) -> dict:
        return {
            "can_submit": self.can_submit,
            "errors": list(self.errors),
            "missing_breaks": [m.to_dict() for m in self.missing_breaks],
        }


class TimecardService:
    """Orchestrates the timecard lifecycle.

    Every write validates first, then saves the timecard, then records the
    audit trail. Audit failures are logged and never undo the primary write.
    """

    def __init__(
        self,
        timecards: TimecardRepository,
        profiles: ProfileRepository,
        projects: ProjectRepository,
        rate_rules: RateRuleService,
        audit: AuditLogService,
        *,
        calculator: Optional[TimecardCalculator] = None,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self._timecards = timecards
        self._profiles = profiles
        self._projects = projects
        self._rate_rules = rate_rules
        self._audit = audit
        self._calculator = calculator or TimecardCalculator()
        self._clock = clock
        self._new_id = id_factory

    # ---- helpers ----

    def _actor(self, actor_id: str) -> Profile:
        profile = self._profiles.get_by_id(actor_id)
        if not profile:
            raise AuthorizationError("Unknown user")
        return profile

    def _can_approve(self, actor: Profile) -> bool:
        return can_approve_timecards(actor.role, self._rate_rules.global_settings())

    def _require_approver(self, actor_id: str) -> Profile:
        actor = self._actor(actor_id)
        if not self._can_approve(actor):
            raise AuthorizationError("Insufficient permissions to approve timecards")
        return actor

    def _load(self, timecard_id: str, expected_version: Optional[int] = None) -> Timecard:
        timecard = self._timecards.get_by_id(timecard_id)
        if not timecard:
            raise NotFoundError(f"Timecard {timecard_id} not found")
        if expected_version is not None and int(expected_version) != timecard.version:
            raise ConcurrencyError("Timecard was modified by someone else; reload and try again")
        return timecard

    def _ensure_visible(self, actor: Profile, timecard: Timecard) -> None:
        if actor.user_id != timecard.user_id and not self._can_approve(actor):
            raise AuthorizationError("Insufficient permissions to access this timecard")

    def _rule_for(self, timecard: Timecard) -> RateRule:
        return self._rate_rules.rule_for_worker(project_id=timecard.project_id, user_id=timecard.user_id)

    def _audit_safely(self, timecard_id: str, write: Callable[[], Optional[str]]) -> Optional[str]:
        try:
            return write()
        except AuditLogError:
            logger.exception("audit log write failed for timecard=%s", timecard_id)
            return None

    def _log_status(self, timecard: Timecard, old: TimecardStatus, actor_id: str, extra=()) -> Optional[str]:
        changes = [FieldChange("status", old, timecard.status), *extra]
        return self._audit_safely(
            timecard.timecard_id,
            lambda: self._audit.record_changes(
                timecard_id=timecard.timecard_id,
                changes=changes,
                changed_by=actor_id,
                action_type=AuditActionType.STATUS_CHANGE,
            ),
        )

    def _calculated_entry(self, entry: TimeEntry, rule: RateRule, *, allow_long_shift: bool) -> tuple[TimeEntry, CalculationResult]:
        issues = validate_sequence(entry)
        if issues:
            raise ValidationError(
                issues[0].message,
                code=issues[0].code,
                details={"work_date": entry.work_date.isoformat(), "errors": [i.code for i in issues]},
            )
        updated, result = self._calculator.apply(entry, rule)
        errors = [e for e in result.validation_errors if not (allow_long_shift and e == ValidationCode.SHIFT_EXCEEDS_MAX.value)]
        if errors:
            raise ValidationError(
                f"Entry for {entry.work_date.isoformat()} requires manual review",
                code=errors[0],
                details={"work_date": entry.work_date.isoformat(), "errors": errors},
            )
        return updated, result

    # ---- calculation ----

    def calculate(
        self,
        entry: TimeEntry,
        *,
        project_id: Optional[str] = None,
        role: Optional[str] = None,
        overrides: Optional[Mapping[str, object]] = None,
    ) -> CalculationResult:
        rule = self._rate_rules.load_rate_rule(project_id, role) if project_id else self._rate_rules.default_rule()
        if overrides:
            unknown = set(overrides) - RULE_OVERRIDE_FIELDS
            if unknown:
                raise ValidationError(
                    f"Unknown rate overrides: {', '.join(sorted(unknown))}",
                    code=ValidationCode.INVALID_REQUEST.value,
                )
            rule = rule.with_overrides(**overrides)
        return self._calculator.calculate(entry, rule)

    # ---- lifecycle ----

    def create_timecard(
        self,
        *,
        actor_id: str,
        project_id: str,
        entries: Sequence[TimeEntry],
        user_id: Optional[str] = None,
    ) -> Timecard:
        actor = self._actor(actor_id)
        owner_id = user_id or actor_id
        if owner_id != actor_id and not self._can_approve(actor):
            raise AuthorizationError("Insufficient permissions to create timecards for other users")
        if not entries:
            raise ValidationError("At least one day is required", code=ValidationCode.INVALID_REQUEST.value)
        dates = [e.work_date for e in entries]
        if len(set(dates)) != len(dates):
            raise ValidationError("Each work date may appear only once", code=ValidationCode.INVALID_REQUEST.value)
        if not self._projects.get_by_id(project_id):
            raise NotFoundError(f"Project {project_id} not found")

        rule = self._rate_rules.rule_for_worker(project_id=project_id, user_id=owner_id)
        calculated = [self._calculated_entry(e, rule, allow_long_shift=False)[0] for e in entries]

        timecard = Timecard(
            timecard_id=self._new_id(),
            user_id=owner_id,
            project_id=project_id,
            status=TimecardStatus.DRAFT,
            entries=(),
            pay_rate=rule.rate,
            last_edited_by=actor_id,
        ).with_entries(calculated)

        saved = self._timecards.save(timecard)
        logger.info("timecard created id=%s user=%s project=%s days=%d", saved.timecard_id, owner_id, project_id, len(calculated))
        return saved

    def get_timecard(self, *, actor_id: str, timecard_id: str) -> Timecard:
        timecard = self._load(timecard_id)
        self._ensure_visible(self._actor(actor_id), timecard)
        return timecard

    def edit(
        self,
        *,
        actor_id: str,
        timecard_id: str,
        entries: Sequence[TimeEntry] = (),
        edit_comments: Optional[str] = None,
        admin_notes: Optional[str] = None,
        return_to_draft: bool = False,
        override_shift_limit: bool = False,
        expected_version: Optional[int] = None,
    ) -> EditResult:
        actor = self._actor(actor_id)
        timecard = self._load(timecard_id, expected_version)
        can_approve = self._can_approve(actor)

        action = classify_action(
            actor_id=actor_id,
            owner_id=timecard.user_id,
            actor_can_approve=can_approve,
            is_return_to_draft=return_to_draft,
        )
        if return_to_draft:
            ensure_transition(timecard.status, TimecardStatus.EDITED_DRAFT)
        else:
            ensure_editable(timecard.status, action)

        comments = optional_text(edit_comments) if edit_comments is not None else timecard.edit_comments
        if action != AuditActionType.USER_EDIT:
            comments = require_non_empty(
                edit_comments or "",
                "Edit reason",
                code=ValidationCode.REASON_REQUIRED.value,
            )

        rule = self._rule_for(timecard)
        allow_long_shift = override_shift_limit and can_approve

        by_date = {e.work_date: e for e in timecard.entries}
        changes: list[FieldChange] = []
        manually_edited = timecard.manually_edited
        for incoming in entries:
            previous = by_date.get(incoming.work_date)
            candidate = replace(
                incoming,
                entry_id=previous.entry_id if previous else None,
                no_break_acknowledged=(
                    previous.no_break_acknowledged if previous and not incoming.has_break_data else False
                ),
            )
            updated, result = self._calculated_entry(candidate, rule, allow_long_shift=allow_long_shift)
            # Remembered so the day still passes submission checks later.
            updated = replace(
                updated,
                shift_limit_overridden=ValidationCode.SHIFT_EXCEEDS_MAX.value in result.validation_errors,
            )
            if previous and detect_manual_edit(previous, result, rule):
                manually_edited = True
            changes.extend(entry_changes(previous, updated))
            by_date[incoming.work_date] = updated

        new_notes = optional_text(admin_notes) if admin_notes is not None else timecard.admin_notes
        if new_notes != timecard.admin_notes and not can_approve:
            raise AuthorizationError("Only approvers can change admin notes")
        changes.extend(
            detect_changes(
                {"edit_comments": timecard.edit_comments, "admin_notes": timecard.admin_notes},
                {"edit_comments": comments, "admin_notes": new_notes},
                fields=HEADER_FIELDS,
            )
        )

        if not changes and not return_to_draft:
            return EditResult(timecard=timecard, changes=(), change_id=None)

        updated_timecard = replace(
            timecard.with_entries(by_date.values()),
            manually_edited=manually_edited,
            admin_edited=timecard.admin_edited or action != AuditActionType.USER_EDIT,
            edit_type=action.value,
            edit_comments=comments,
            admin_notes=new_notes,
            last_edited_by=actor_id,
        )
        if return_to_draft:
            updated_timecard = replace(updated_timecard, status=TimecardStatus.EDITED_DRAFT, submitted_at=None)

        saved = self._timecards.save(updated_timecard)
        logger.info("timecard edited id=%s action=%s fields=%d", saved.timecard_id, action.value, len(changes))

        change_id = self._audit_safely(
            saved.timecard_id,
            lambda: self._audit.record_changes(
                timecard_id=saved.timecard_id,
                changes=changes,
                changed_by=actor_id,
                action_type=action,
            ),
        )
        if return_to_draft:
            self._log_status(saved, timecard.status, actor_id)

        return EditResult(timecard=saved, changes=tuple(changes), change_id=change_id)

    def _check(self, timecard: Timecard, today: date) -> SubmissionCheck:
        rule = self._rule_for(timecard)
        errors: list[str] = []
        missing: list[MissingBreak] = []

        project = self._projects.get_by_id(timecard.project_id)
        if not validate_submission_timing(
            project.start_date if project else None,
            today=today,
            enforce=rule.submission_opens_on_start_date,
        ):
            errors.append(ValidationCode.SUBMISSION_NOT_OPEN.value)

        if not timecard.entries:
            errors.append(ValidationCode.INCOMPLETE_SHIFT.value)

        for entry in timecard.entries:
            result = self._calculator.calculate(entry, rule)
            day_errors = [
                e
                for e in result.validation_errors
                if not (entry.shift_limit_overridden and e == ValidationCode.SHIFT_EXCEEDS_MAX.value)
            ]
            if day_errors:
                errors.extend(day_errors)
            elif not result.is_valid and not result.validation_errors:
                errors.append(ValidationCode.INCOMPLETE_SHIFT.value)
            if validate_missing_break(entry, rule):
                missing.append(MissingBreak(timecard.timecard_id, entry.work_date, result.total_hours))

        if missing:
            errors.append(ValidationCode.MISSING_BREAK_UNRESOLVED.value)
        errors = list(dict.fromkeys(errors))
        return SubmissionCheck(can_submit=not errors, errors=tuple(errors), missing_breaks=tuple(missing))

    def validate_submission(
        self,
        *,
        actor_id: str,
        timecard_ids: Sequence[str],
        project_id: Optional[str] = None,
    ) -> SubmissionCheck:
        """Pre-flight check over one or more timecards without changing them."""
        actor = self._actor(actor_id)
        if not timecard_ids:
            raise ValidationError("timecardIds is required", code=ValidationCode.INVALID_REQUEST.value)

        found = {t.timecard_id: t for t in self._timecards.get_many(timecard_ids)}
        missing_ids = [i for i in timecard_ids if i not in found]
        if missing_ids:
            raise NotFoundError(f"Timecards not found: {', '.join(missing_ids)}")

        today = self._clock().date()
        errors: list[str] = []
        missing: list[MissingBreak] = []
        for timecard_id in dict.fromkeys(timecard_ids):
            timecard = found[timecard_id]
            self._ensure_visible(actor, timecard)
            if project_id and timecard.project_id != project_id:
                raise ValidationError(
                    f"Timecard {timecard_id} does not belong to project {project_id}",
                    code=ValidationCode.INVALID_REQUEST.value,
                )
            check = self._check(timecard, today)
            errors.extend(check.errors)
            missing.extend(check.missing_breaks)

        errors = list(dict.fromkeys(errors))
        return SubmissionCheck(can_submit=not errors, errors=tuple(errors), missing_breaks=tuple(missing))

    def submit(self, *, actor_id: str, timecard_id: str, expected_version: Optional[int] = None) -> Timecard:
        self._actor(actor_id)
        timecard = self._load(timecard_id, expected_version)
        if timecard.user_id != actor_id:
            raise AuthorizationError("Only the owner can submit a timecard")
        ensure_transition(timecard.status, TimecardStatus.SUBMITTED)

        check = self._check(timecard, self._clock().date())
        if not check.can_submit:
            if check.missing_breaks:
                raise ValidationError(
                    "Missing break information must be resolved before submitting",
                    code=ValidationCode.MISSING_BREAK_UNRESOLVED.value,
                    details=[m.to_dict() for m in check.missing_breaks],
                )
            raise ValidationError(
                "Timecard cannot be submitted",
                code=check.errors[0],
                details={"errors": list(check.errors)},
            )

        saved = self._timecards.save(
            replace(
                timecard,
                status=TimecardStatus.SUBMITTED,
                submitted_at=self._clock(),
                rejection_reason=None,
                rejected_fields=(),
            )
        )
        logger.info("timecard submitted id=%s", saved.timecard_id)
        self._log_status(saved, timecard.status, actor_id)
        return saved

    def approve(self, *, actor_id: str, timecard_id: str, expected_version: Optional[int] = None) -> Timecard:
        self._require_approver(actor_id)
        timecard = self._load(timecard_id, expected_version)
        ensure_transition(timecard.status, TimecardStatus.APPROVED)

        saved = self._timecards.save(
            replace(
                timecard,
                status=TimecardStatus.APPROVED,
                approved_at=self._clock(),
                approved_by=actor_id,
            )
        )
        logger.info("timecard approved id=%s by=%s", saved.timecard_id, actor_id)
        self._log_status(saved, timecard.status, actor_id)
        return saved

    def reject(
        self,
        *,
        actor_id: str,
        timecard_id: str,
        reason: str,
        rejected_fields: Sequence[str] = (),
        expected_version: Optional[int] = None,
    ) -> Timecard:
        self._require_approver(actor_id)
        reason = require_non_empty(reason or "", "Rejection reason", code=ValidationCode.REASON_REQUIRED.value)
        timecard = self._load(timecard_id, expected_version)
        ensure_transition(timecard.status, TimecardStatus.REJECTED)

        fields = tuple(dict.fromkeys(f for f in rejected_fields if f))
        saved = self._timecards.save(
            replace(
                timecard,
                status=TimecardStatus.REJECTED,
                rejection_reason=reason,
                rejected_fields=fields,
            )
        )
        logger.info("timecard rejected id=%s by=%s", saved.timecard_id, actor_id)
        self._log_status(
            saved,
            timecard.status,
            actor_id,
            extra=detect_changes(
                {"rejection_reason": timecard.rejection_reason, "rejected_fields": timecard.rejected_fields},
                {"rejection_reason": reason, "rejected_fields": fields},
                fields=("rejection_reason", "rejected_fields"),
            ),
        )
        return saved

    def reopen(self, *, actor_id: str, timecard_id: str, expected_version: Optional[int] = None) -> Timecard:
        actor = self._actor(actor_id)
        timecard = self._load(timecard_id, expected_version)
        self._ensure_visible(actor, timecard)
        ensure_transition(timecard.status, TimecardStatus.DRAFT)

        saved = self._timecards.save(replace(timecard, status=TimecardStatus.DRAFT, submitted_at=None))
        logger.info("timecard reopened id=%s", saved.timecard_id)
        self._log_status(saved, timecard.status, actor_id)
        return saved

    def resolve_breaks(
        self,
        *,
        actor_id: str,
        timecard_id: str,
        resolutions: Mapping[date, BreakResolution],
        expected_version: Optional[int] = None,
    ) -> Timecard:
        """Apply add_break / no_break decisions to days flagged as missing a break."""
        actor = self._actor(actor_id)
        timecard = self._load(timecard_id, expected_version)
        action = classify_action(
            actor_id=actor_id,
            owner_id=timecard.user_id,
            actor_can_approve=self._can_approve(actor),
            is_return_to_draft=False,
        )
        ensure_editable(timecard.status, action)
        if not resolutions:
            raise ValidationError("No break resolutions supplied", code=ValidationCode.INVALID_REQUEST.value)

        rule = self._rule_for(timecard)
        by_date = {e.work_date: e for e in timecard.entries}
        changes: list[FieldChange] = []
        for work_date, resolution in sorted(resolutions.items()):
            entry = by_date.get(work_date)
            if entry is None:
                raise ValidationError(
                    f"No entry for {work_date.isoformat()}",
                    code=ValidationCode.INVALID_REQUEST.value,
                    details={"work_date": work_date.isoformat()},
                )
            if not validate_missing_break(entry, rule):
                raise ValidationError(
                    f"{work_date.isoformat()} is not missing a break",
                    code=ValidationCode.INVALID_REQUEST.value,
                    details={"work_date": work_date.isoformat()},
                )
            resolved = resolve_missing_break(entry, resolution, rule, self._calculator)
            changes.extend(entry_changes(entry, resolved))
            by_date[work_date] = resolved

        saved = self._timecards.save(
            replace(timecard.with_entries(by_date.values()), last_edited_by=actor_id)
        )
        logger.info("breaks resolved id=%s days=%d", saved.timecard_id, len(resolutions))
        self._audit_safely(
            saved.timecard_id,
            lambda: self._audit.record_changes(
                timecard_id=saved.timecard_id,
                changes=changes,
                changed_by=actor_id,
                action_type=action,
            ),
        )
        return saved
