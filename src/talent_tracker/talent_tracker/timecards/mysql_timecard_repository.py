from __future__ import annotations

import json
import uuid
from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.decimal_utils import to_decimal
from ..core.enums import TimecardStatus
from ..core.exceptions import ConcurrencyError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import TimeEntry, Timecard, TimecardReportRow
from .repository import TimecardRepository

_HEADER_COLUMNS = """
    id, user_id, project_id, status, pay_rate, total_hours, total_break_duration, total_pay,
    manually_edited, admin_edited, edit_type, edit_comments, admin_notes, rejection_reason,
    rejected_fields, submitted_at, approved_at, approved_by, last_edited_by, created_at, updated_at, version
"""


def _load_rejected_fields(raw) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(json.loads(raw))


def _row_to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=r["id"],
        work_date=r["work_date"],
        check_in=r.get("check_in_time"),
        check_out=r.get("check_out_time"),
        break_start=r.get("break_start_time"),
        break_end=r.get("break_end_time"),
        no_break_acknowledged=bool(r.get("no_break_acknowledged")),
        shift_limit_overridden=bool(r.get("shift_limit_overridden")),
        hours_worked=to_decimal(r.get("hours_worked")),
        break_minutes=to_decimal(r.get("break_duration")),
        daily_pay=to_decimal(r.get("daily_pay")),
    )


def _row_to_timecard(r: dict, entries: Sequence[TimeEntry]) -> Timecard:
    return Timecard(
        timecard_id=r["id"],
        user_id=r["user_id"],
        project_id=r["project_id"],
        status=TimecardStatus(r["status"]),
        entries=tuple(sorted(entries, key=lambda e: e.work_date)),
        pay_rate=to_decimal(r.get("pay_rate")),
        total_hours=to_decimal(r.get("total_hours")),
        total_break_minutes=to_decimal(r.get("total_break_duration")),
        total_pay=to_decimal(r.get("total_pay")),
        manually_edited=bool(r.get("manually_edited")),
        admin_edited=bool(r.get("admin_edited")),
        edit_type=r.get("edit_type"),
        edit_comments=r.get("edit_comments"),
        admin_notes=r.get("admin_notes"),
        rejection_reason=r.get("rejection_reason"),
        rejected_fields=_load_rejected_fields(r.get("rejected_fields")),
        submitted_at=r.get("submitted_at"),
        approved_at=r.get("approved_at"),
        approved_by=r.get("approved_by"),
        last_edited_by=r.get("last_edited_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        version=int(r.get("version") or 0),
    )


class MySQLTimecardRepository(TimecardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, timecard_id: str) -> Optional[Timecard]:
        found = self.get_many([timecard_id])
        return found[0] if found else None

    def get_many(self, timecard_ids: Sequence[str]) -> Sequence[Timecard]:
        ids = list(dict.fromkeys(timecard_ids))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_HEADER_COLUMNS} FROM timecard_headers WHERE id IN ({in_clause(ids)})",
                tuple(ids),
            )
            headers = fetchall(cur)
            if not headers:
                return []

            cur.execute(
                f"""
                SELECT id, timecard_header_id, work_date, check_in_time, check_out_time,
                       break_start_time, break_end_time, no_break_acknowledged, shift_limit_overridden,
                       hours_worked, break_duration, daily_pay
                FROM timecard_daily_entries
                WHERE timecard_header_id IN ({in_clause(ids)})
                ORDER BY work_date
                """,
                tuple(ids),
            )
            entries: dict[str, list[TimeEntry]] = {}
            for r in fetchall(cur):
                entries.setdefault(r["timecard_header_id"], []).append(_row_to_entry(r))

        by_id = {h["id"]: _row_to_timecard(h, entries.get(h["id"], [])) for h in headers}
        return [by_id[i] for i in ids if i in by_id]

    def save(self, timecard: Timecard) -> Timecard:
        now = now_local()
        params = (
            timecard.user_id,
            timecard.project_id,
            timecard.status.value,
            timecard.pay_rate,
            timecard.total_hours,
            timecard.total_break_minutes,
            timecard.total_pay,
            int(timecard.manually_edited),
            int(timecard.admin_edited),
            timecard.edit_type,
            timecard.edit_comments,
            timecard.admin_notes,
            timecard.rejection_reason,
            json.dumps(list(timecard.rejected_fields)) if timecard.rejected_fields else None,
            timecard.submitted_at,
            timecard.approved_at,
            timecard.approved_by,
            timecard.last_edited_by,
        )
        entries = tuple(e if e.entry_id else replace(e, entry_id=str(uuid.uuid4())) for e in timecard.entries)

        with db_cursor(self._conn_factory) as (_, cur):
            if timecard.version == 0:
                cur.execute(
                    """
                    INSERT INTO timecard_headers(
                        user_id, project_id, status, pay_rate, total_hours, total_break_duration, total_pay,
                        manually_edited, admin_edited, edit_type, edit_comments, admin_notes, rejection_reason,
                        rejected_fields, submitted_at, approved_at, approved_by, last_edited_by,
                        id, created_at, updated_at, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    params + (timecard.timecard_id, now, now),
                )
                created_at = now
            else:
                cur.execute(
                    """
                    UPDATE timecard_headers
                    SET user_id=%s, project_id=%s, status=%s, pay_rate=%s, total_hours=%s,
                        total_break_duration=%s, total_pay=%s, manually_edited=%s, admin_edited=%s,
                        edit_type=%s, edit_comments=%s, admin_notes=%s, rejection_reason=%s,
                        rejected_fields=%s, submitted_at=%s, approved_at=%s, approved_by=%s,
                        last_edited_by=%s, updated_at=%s, version=version+1
                    WHERE id=%s AND version=%s
                    """,
                    params + (now, timecard.timecard_id, timecard.version),
                )
                if cur.rowcount == 0:
                    raise ConcurrencyError("Timecard was modified by someone else; reload and try again")
                created_at = timecard.created_at
                cur.execute("DELETE FROM timecard_daily_entries WHERE timecard_header_id=%s", (timecard.timecard_id,))

            if entries:
                cur.executemany(
                    """
                    INSERT INTO timecard_daily_entries(
                        id, timecard_header_id, work_date, check_in_time, check_out_time,
                        break_start_time, break_end_time, no_break_acknowledged, shift_limit_overridden,
                        hours_worked, break_duration, daily_pay
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    [
                        (
                            e.entry_id,
                            timecard.timecard_id,
                            e.work_date,
                            e.check_in,
                            e.check_out,
                            e.break_start,
                            e.break_end,
                            int(e.no_break_acknowledged),
                            int(e.shift_limit_overridden),
                            e.hours_worked,
                            e.break_minutes,
                            e.daily_pay,
                        )
                        for e in entries
                    ],
                )

        return replace(
            timecard,
            entries=entries,
            created_at=created_at,
            updated_at=now,
            version=timecard.version + 1,
        )

    def list_report_rows(
        self,
        *,
        project_id: str,
        status: Optional[TimecardStatus] = None,
        limit: Optional[int] = None,
    ) -> Sequence[TimecardReportRow]:
        where = ["h.project_id=%s"]
        params: list[object] = [project_id]
        if status is not None:
            where.append("h.status=%s")
            params.append(status.value)

        limit_sql = ""
        if limit is not None:
            limit_sql = "LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT h.id, h.user_id, COALESCE(p.full_name, h.user_id) AS full_name, h.status,
                       MIN(d.work_date) AS period_start_date, MAX(d.work_date) AS period_end_date,
                       h.total_hours, h.total_break_duration, h.total_pay, h.manually_edited
                FROM timecard_headers h
                LEFT JOIN profiles p ON p.id = h.user_id
                LEFT JOIN timecard_daily_entries d ON d.timecard_header_id = h.id
                WHERE {" AND ".join(where)}
                GROUP BY h.id, h.user_id, p.full_name, h.status, h.total_hours,
                         h.total_break_duration, h.total_pay, h.manually_edited
                ORDER BY full_name, period_start_date
                {limit_sql}
                """,
                tuple(params),
            )
            return [
                TimecardReportRow(
                    timecard_id=r["id"],
                    user_id=r["user_id"],
                    full_name=r["full_name"],
                    status=TimecardStatus(r["status"]),
                    period_start_date=r.get("period_start_date"),
                    period_end_date=r.get("period_end_date"),
                    total_hours=to_decimal(r.get("total_hours")),
                    total_break_minutes=to_decimal(r.get("total_break_duration")),
                    total_pay=to_decimal(r.get("total_pay")),
                    manually_edited=bool(r.get("manually_edited")),
                )
                for r in fetchall(cur)
            ]
