from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TimecardStatus
from .model import Timecard, TimecardReportRow


class TimecardRepository(Protocol):
    def get_by_id(self, timecard_id: str) -> Optional[Timecard]:
        raise NotImplementedError

    def get_many(self, timecard_ids: Sequence[str]) -> Sequence[Timecard]:
        raise NotImplementedError

    def save(self, timecard: Timecard) -> Timecard:
        """Insert (version 0) or update header and daily entries.

        Updates only apply when the stored version equals timecard.version;
        otherwise ConcurrencyError. Returns the timecard with its new version.
        """

        raise NotImplementedError

    def list_report_rows(
        self,
        *,
        project_id: str,
        status: Optional[TimecardStatus] = None,
        limit: Optional[int] = None,
    ) -> Sequence[TimecardReportRow]:
        raise NotImplementedError
