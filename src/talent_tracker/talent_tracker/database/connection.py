from __future__ import annotations

from dataclasses import dataclass

import mysql.connector

CONNECT_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "talent_tracker")),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict:
        kwargs = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "connection_timeout": CONNECT_TIMEOUT_SECONDS,
        }
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Hands out a fresh connection for each unit of work.

    Repositories share one instance; `db_cursor` opens, commits and closes.
    """

    def __init__(self, config: DBConfig):
        self.config = config

    def connect(self):
        conn = mysql.connector.connect(**self.config.connect_kwargs())
        conn.autocommit = False
        return conn
