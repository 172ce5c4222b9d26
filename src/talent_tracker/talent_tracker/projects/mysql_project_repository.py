from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Project
from .repository import ProjectRepository


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: str) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, start_date, end_date, escort_break_minutes, staff_break_minutes
                FROM projects
                WHERE id=%s
                """,
                (project_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Project(
                project_id=r["id"],
                name=r["name"],
                start_date=r.get("start_date"),
                end_date=r.get("end_date"),
                escort_break_minutes=r.get("escort_break_minutes"),
                staff_break_minutes=r.get("staff_break_minutes"),
            )
