from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector.constants import ClientFlag


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: float = 5.0
    statement_timeout: float = 5.0

    @classmethod
    def from_dict(cls, db_config: dict, **overrides) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "employee_db")),
            **overrides,
        )


class DatabaseConnection:
    """DB connection factory.

    Every call opens a fresh connection; callers close it when done.
    Sessions run in UTC and report matched rather than changed rows, so an
    UPDATE that rewrites identical values still counts as affected.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, database: bool = True, timeout: Optional[float] = None):
        """Open a connection; `timeout` (seconds) lowers the configured connect timeout."""
        connect_timeout = self._config.connect_timeout
        if timeout is not None:
            connect_timeout = min(connect_timeout, timeout)
        kwargs = dict(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            connection_timeout=max(1, math.ceil(connect_timeout)),
            time_zone="+00:00",
            client_flags=[ClientFlag.FOUND_ROWS],
        )
        if database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)
