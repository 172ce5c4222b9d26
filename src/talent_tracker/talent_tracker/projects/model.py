from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Project:
    project_id: str
    name: str
    start_date: Optional[date]
    end_date: Optional[date] = None
    escort_break_minutes: Optional[int] = None
    staff_break_minutes: Optional[int] = None
