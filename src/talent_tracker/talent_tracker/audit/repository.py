from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AuditActionType
from .model import AuditEntry, AuditLogFilter


class AuditRepository(Protocol):
    def insert_many(self, entries: Sequence[AuditEntry]) -> int:
        raise NotImplementedError

    def list_for_timecard(self, timecard_id: str, *, filter: Optional[AuditLogFilter] = None) -> Sequence[AuditEntry]:
        """Newest first."""

        raise NotImplementedError

    def list_field_names(self, timecard_id: str, *, action_type: AuditActionType) -> Sequence[str]:
        raise NotImplementedError
