from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from src.talent_tracker.talent_tracker.container import assemble
from src.talent_tracker.talent_tracker.core.enums import SystemRole, TimeType
from src.talent_tracker.talent_tracker.core.exceptions import ConcurrencyError, PersistenceError
from src.talent_tracker.talent_tracker.projects.model import Project
from src.talent_tracker.talent_tracker.rates.model import GlobalSettings, RoleRate, TeamAssignment
from src.talent_tracker.talent_tracker.timecards.model import TimecardReportRow
from src.talent_tracker.talent_tracker.users.model import Profile

PROJECT_ID = "proj-1"
ADMIN_ID = "admin-1"
SUPERVISOR_ID = "sup-1"
ESCORT_ID = "escort-1"
OTHER_ESCORT_ID = "escort-2"

NOW = datetime(2024, 1, 16, 9, 0)


class InMemoryProfiles:
    def __init__(self, profiles):
        self._profiles = {p.user_id: p for p in profiles}

    def get_by_id(self, user_id):
        return self._profiles.get(user_id)


class InMemoryProjects:
    def __init__(self, projects):
        self._projects = {p.project_id: p for p in projects}

    def get_by_id(self, project_id):
        return self._projects.get(project_id)


class InMemoryRates:
    def __init__(self, *, settings=None, role_rates=(), assignments=()):
        self.settings = settings
        self.role_rates = {(r.project_id, r.role): r for r in role_rates}
        self.assignments = {(a.project_id, a.user_id): a for a in assignments}

    def get_global_settings(self):
        return self.settings

    def get_role_rate(self, *, project_id, role):
        return self.role_rates.get((project_id, role))

    def get_assignment(self, *, project_id, user_id):
        return self.assignments.get((project_id, user_id))


class InMemoryTimecards:
    def __init__(self, profiles: InMemoryProfiles):
        self._profiles = profiles
        self.rows = {}
        self.saves = 0

    def get_by_id(self, timecard_id):
        return self.rows.get(timecard_id)

    def get_many(self, timecard_ids):
        return [self.rows[i] for i in dict.fromkeys(timecard_ids) if i in self.rows]

    def save(self, timecard):
        stored = self.rows.get(timecard.timecard_id)
        if timecard.version == 0 and stored is not None:
            raise ConcurrencyError("duplicate insert")
        if timecard.version > 0 and (stored is None or stored.version != timecard.version):
            raise ConcurrencyError("stale version")

        entries = tuple(e if e.entry_id else replace(e, entry_id=str(uuid.uuid4())) for e in timecard.entries)
        saved = replace(timecard, entries=entries, version=timecard.version + 1)
        self.rows[timecard.timecard_id] = saved
        self.saves += 1
        return saved

    def list_report_rows(self, *, project_id, status=None, limit=None):
        out = []
        for t in self.rows.values():
            if t.project_id != project_id or (status is not None and t.status != status):
                continue
            profile = self._profiles.get_by_id(t.user_id)
            out.append(
                TimecardReportRow(
                    timecard_id=t.timecard_id,
                    user_id=t.user_id,
                    full_name=profile.full_name if profile else t.user_id,
                    status=t.status,
                    period_start_date=t.period_start_date,
                    period_end_date=t.period_end_date,
                    total_hours=t.total_hours,
                    total_break_minutes=t.total_break_minutes,
                    total_pay=t.total_pay,
                    manually_edited=t.manually_edited,
                )
            )
        out.sort(key=lambda r: (r.full_name, r.period_start_date or date.min))
        return out[:limit] if limit is not None else out


class InMemoryAudit:
    def __init__(self):
        self.entries = []
        self.fail_writes = False

    def insert_many(self, entries):
        if self.fail_writes:
            raise PersistenceError("audit table unavailable")
        self.entries.extend(entries)
        return len(entries)

    def list_for_timecard(self, timecard_id, *, filter=None):
        rows = [e for e in self.entries if e.timecard_id == timecard_id]
        if filter is not None:
            if filter.action_types:
                rows = [e for e in rows if e.action_type in filter.action_types]
            if filter.field_names:
                rows = [e for e in rows if e.field_name in filter.field_names]
            if filter.date_from is not None:
                rows = [e for e in rows if e.changed_at >= filter.date_from]
            if filter.date_to is not None:
                rows = [e for e in rows if e.changed_at <= filter.date_to]
        rows.sort(key=lambda e: e.changed_at, reverse=True)
        if filter is not None and filter.limit is not None:
            rows = rows[filter.offset : filter.offset + filter.limit]
        return rows

    def list_field_names(self, timecard_id, *, action_type):
        return sorted({e.field_name for e in self.entries if e.timecard_id == timecard_id and e.action_type == action_type})


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return Clock(NOW)


@pytest.fixture
def repos():
    profiles = InMemoryProfiles(
        [
            Profile(ADMIN_ID, "Alex Admin", SystemRole.ADMIN),
            Profile(SUPERVISOR_ID, "Sam Supervisor", SystemRole.SUPERVISOR),
            Profile(ESCORT_ID, "Erin Escort", SystemRole.TALENT_ESCORT),
            Profile(OTHER_ESCORT_ID, "Eli Escort", SystemRole.TALENT_ESCORT),
        ]
    )
    projects = InMemoryProjects([Project(PROJECT_ID, "Spring Premiere", start_date=date(2024, 1, 15))])
    rates = InMemoryRates(
        settings=GlobalSettings(),
        role_rates=[
            RoleRate(PROJECT_ID, "talent_escort", Decimal("20.00")),
            RoleRate(PROJECT_ID, "supervisor", Decimal("300.00"), time_type=TimeType.DAILY),
        ],
        assignments=[
            TeamAssignment(PROJECT_ID, ESCORT_ID, "talent_escort"),
            TeamAssignment(PROJECT_ID, OTHER_ESCORT_ID, "talent_escort"),
            TeamAssignment(PROJECT_ID, SUPERVISOR_ID, "supervisor"),
        ],
    )
    return SimpleNamespace(
        profiles=profiles,
        projects=projects,
        rates=rates,
        timecards=InMemoryTimecards(profiles),
        audit=InMemoryAudit(),
    )


@pytest.fixture
def container(repos, clock):
    return assemble(
        profiles_repo=repos.profiles,
        projects_repo=repos.projects,
        rates_repo=repos.rates,
        timecards_repo=repos.timecards,
        audit_repo=repos.audit,
        clock=clock,
    )
