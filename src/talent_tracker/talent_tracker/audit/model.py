from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AuditActionType


@dataclass(frozen=True)
class FieldChange:
    field_name: str
    old_value: Any
    new_value: Any
    work_date: Optional[date] = None


@dataclass(frozen=True)
class AuditEntry:
    entry_id: str
    timecard_id: str
    change_id: str
    field_name: str
    old_value: Optional[str]
    new_value: Optional[str]
    changed_by: str
    changed_at: datetime
    action_type: AuditActionType
    work_date: Optional[date] = None
    changed_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "timecard_id": self.timecard_id,
            "change_id": self.change_id,
            "field_name": self.field_name,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "changed_by": self.changed_by,
            "changed_by_name": self.changed_by_name,
            "changed_at": self.changed_at.isoformat(),
            "action_type": self.action_type.value,
            "work_date": self.work_date.isoformat() if self.work_date else None,
        }


@dataclass(frozen=True)
class GroupedAuditEntry:
    change_id: str
    changed_at: datetime
    changed_by: str
    action_type: AuditActionType
    changes: tuple[AuditEntry, ...]

    def to_dict(self) -> dict:
        return {
            "change_id": self.change_id,
            "changed_at": self.changed_at.isoformat(),
            "changed_by": self.changed_by,
            "action_type": self.action_type.value,
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass(frozen=True)
class AuditLogFilter:
    action_types: tuple[AuditActionType, ...] = ()
    field_names: tuple[str, ...] = ()
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: Optional[int] = None
    offset: int = 0


@dataclass(frozen=True)
class AuditStatistics:
    total_changes: int = 0
    by_action: dict[str, int] = field(default_factory=dict)
    last_modified: Optional[datetime] = None
    last_modified_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "total_changes": self.total_changes,
            "by_action": dict(self.by_action),
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
            "last_modified_by": self.last_modified_by,
        }
