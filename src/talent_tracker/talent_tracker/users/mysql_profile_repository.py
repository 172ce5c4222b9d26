from __future__ import annotations

from typing import Optional

from ..core.enums import SystemRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Profile
from .repository import ProfileRepository


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, email, role
                FROM profiles
                WHERE id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Profile(
                user_id=row["id"],
                full_name=row["full_name"],
                email=row.get("email"),
                role=SystemRole(row["role"]) if row.get("role") else None,
            )
