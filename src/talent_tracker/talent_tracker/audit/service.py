from __future__ import annotations

import json
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core import constants
from ..core.enums import AuditActionType, TimecardStatus
from ..core.exceptions import AuditLogError, PersistenceError
from ..timecards.model import TimeEntry
from .model import AuditEntry, AuditLogFilter, AuditStatistics, FieldChange, GroupedAuditEntry
from .repository import AuditRepository

logger = logging.getLogger(__name__)

DAY_FIELDS = ("check_in", "check_out", "break_start", "break_end")
HEADER_FIELDS = ("edit_comments", "admin_notes", "rejection_reason", "rejected_fields")
STATUS_FIELD = "status"


def serialize_value(value: Any) -> Optional[str]:
    """Text form stored in old_value/new_value."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return json.dumps([serialize_value(v) for v in value])
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, default=str)


def _normalize(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (list, tuple)):
        return tuple(value) or None
    return value


def detect_changes(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
    *,
    fields: Iterable[str],
    work_date: Optional[date] = None,
) -> list[FieldChange]:
    """Compare tracked fields; None, empty string and empty list are equal."""
    changes: list[FieldChange] = []
    for name in fields:
        old_value = old.get(name)
        new_value = new.get(name)
        if _normalize(old_value) != _normalize(new_value):
            changes.append(FieldChange(name, old_value, new_value, work_date))
    return changes


def entry_changes(old: Optional[TimeEntry], new: TimeEntry) -> list[FieldChange]:
    def as_map(e: Optional[TimeEntry]) -> dict:
        if e is None:
            return {}
        return {
            "check_in": e.check_in,
            "check_out": e.check_out,
            "break_start": e.break_start,
            "break_end": e.break_end,
        }

    return detect_changes(as_map(old), as_map(new), fields=DAY_FIELDS, work_date=new.work_date)


class AuditLogService:
    def __init__(
        self,
        audit: AuditRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self._audit = audit
        self._clock = clock
        self._new_id = id_factory

    def record_changes(
        self,
        *,
        timecard_id: str,
        changes: Sequence[FieldChange],
        changed_by: str,
        action_type: AuditActionType,
    ) -> Optional[str]:
        """Write one row per changed field; returns the shared change_id."""
        if not changes:
            return None

        change_id = self._new_id()
        changed_at = self._clock()
        entries = [
            AuditEntry(
                entry_id=self._new_id(),
                timecard_id=timecard_id,
                change_id=change_id,
                field_name=c.field_name,
                old_value=serialize_value(c.old_value),
                new_value=serialize_value(c.new_value),
                changed_by=changed_by,
                changed_at=changed_at,
                action_type=action_type,
                work_date=c.work_date,
            )
            for c in changes
        ]
        try:
            self._audit.insert_many(entries)
        except PersistenceError as e:
            raise AuditLogError(f"Failed to record audit log entries: {e}", timecard_id=timecard_id) from e

        logger.info(
            "audit %s timecard=%s fields=%d change_id=%s",
            action_type.value,
            timecard_id,
            len(entries),
            change_id,
        )
        return change_id

    def log_status_change(
        self,
        *,
        timecard_id: str,
        old_status: TimecardStatus,
        new_status: TimecardStatus,
        changed_by: str,
    ) -> Optional[str]:
        return self.record_changes(
            timecard_id=timecard_id,
            changes=[FieldChange(STATUS_FIELD, old_status, new_status)],
            changed_by=changed_by,
            action_type=AuditActionType.STATUS_CHANGE,
        )

    def get_audit_logs(self, timecard_id: str, filter: Optional[AuditLogFilter] = None) -> list[AuditEntry]:
        f = filter or AuditLogFilter(limit=constants.DEFAULT_AUDIT_LIMIT)
        try:
            return list(self._audit.list_for_timecard(timecard_id, filter=f))
        except PersistenceError as e:
            raise AuditLogError(f"Failed to retrieve audit logs: {e}", timecard_id=timecard_id) from e

    def get_grouped_audit_logs(self, timecard_id: str, filter: Optional[AuditLogFilter] = None) -> list[GroupedAuditEntry]:
        groups: dict[str, list[AuditEntry]] = {}
        for entry in self.get_audit_logs(timecard_id, filter):
            groups.setdefault(entry.change_id, []).append(entry)

        grouped = [
            GroupedAuditEntry(
                change_id=change_id,
                changed_at=rows[0].changed_at,
                changed_by=rows[0].changed_by,
                action_type=rows[0].action_type,
                changes=tuple(rows),
            )
            for change_id, rows in groups.items()
        ]
        grouped.sort(key=lambda g: g.changed_at, reverse=True)
        return grouped

    def get_statistics(self, timecard_id: str) -> AuditStatistics:
        entries = self.get_audit_logs(timecard_id, AuditLogFilter())
        by_action = {a.value: 0 for a in AuditActionType}
        for e in entries:
            by_action[e.action_type.value] += 1

        latest = max(entries, key=lambda e: e.changed_at, default=None)
        return AuditStatistics(
            total_changes=len(entries),
            by_action=by_action,
            last_modified=latest.changed_at if latest else None,
            last_modified_by=(latest.changed_by_name or latest.changed_by) if latest else None,
        )

    def get_rejected_fields(self, timecard_id: str) -> list[str]:
        try:
            return list(self._audit.list_field_names(timecard_id, action_type=AuditActionType.REJECTION_EDIT))
        except PersistenceError:
            logger.exception("could not read rejected fields for timecard=%s", timecard_id)
            return []
