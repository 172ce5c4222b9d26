from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AuditActionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import AuditEntry, AuditLogFilter
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_many(self, entries: Sequence[AuditEntry]) -> int:
        if not entries:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO timecard_audit_log(
                    id, timecard_id, change_id, field_name, old_value, new_value,
                    changed_by, changed_at, action_type, work_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        e.entry_id,
                        e.timecard_id,
                        e.change_id,
                        e.field_name,
                        e.old_value,
                        e.new_value,
                        e.changed_by,
                        e.changed_at,
                        e.action_type.value,
                        e.work_date,
                    )
                    for e in entries
                ],
            )
            return len(entries)

    def list_for_timecard(self, timecard_id: str, *, filter: Optional[AuditLogFilter] = None) -> Sequence[AuditEntry]:
        f = filter or AuditLogFilter()
        clauses = ["a.timecard_id=%s"]
        params: list[object] = [timecard_id]

        if f.action_types:
            clauses.append(f"a.action_type IN ({in_clause(f.action_types)})")
            params.extend(a.value for a in f.action_types)
        if f.field_names:
            clauses.append(f"a.field_name IN ({in_clause(f.field_names)})")
            params.extend(f.field_names)
        if f.date_from is not None:
            clauses.append("a.changed_at >= %s")
            params.append(f.date_from)
        if f.date_to is not None:
            clauses.append("a.changed_at <= %s")
            params.append(f.date_to)

        where = " AND ".join(clauses)
        limit_sql = ""
        if f.limit is not None:
            limit_sql = "LIMIT %s OFFSET %s"
            params.extend([int(f.limit), int(f.offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.id, a.timecard_id, a.change_id, a.field_name, a.old_value, a.new_value,
                       a.changed_by, a.changed_at, a.action_type, a.work_date,
                       p.full_name AS changed_by_name
                FROM timecard_audit_log a
                LEFT JOIN profiles p ON p.id = a.changed_by
                WHERE {where}
                ORDER BY a.changed_at DESC, a.field_name ASC
                {limit_sql}
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            return [
                AuditEntry(
                    entry_id=r["id"],
                    timecard_id=r["timecard_id"],
                    change_id=r["change_id"],
                    field_name=r["field_name"],
                    old_value=r.get("old_value"),
                    new_value=r.get("new_value"),
                    changed_by=r["changed_by"],
                    changed_at=r["changed_at"],
                    action_type=AuditActionType(r["action_type"]),
                    work_date=r.get("work_date"),
                    changed_by_name=r.get("changed_by_name"),
                )
                for r in rows
            ]

    def list_field_names(self, timecard_id: str, *, action_type: AuditActionType) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT field_name
                FROM timecard_audit_log
                WHERE timecard_id=%s AND action_type=%s
                ORDER BY field_name
                """,
                (timecard_id, action_type.value),
            )
            return [r["field_name"] for r in fetchall(cur)]
