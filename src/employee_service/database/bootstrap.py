from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from .connection import DatabaseConnection
from .mysql_base import db_cursor

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().with_name("schema.sql")


def _iter_sql_statements(sql: str) -> Iterator[str]:
    """Yield `;`-terminated statements, ignoring `--` comment lines and `;` inside quotes."""
    body = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))
    quote: Optional[str] = None
    start = 0
    for pos, ch in enumerate(body):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            statement = body[start:pos].strip()
            if statement:
                yield statement
            start = pos + 1
    rest = body[start:].strip()
    if rest:
        yield rest


def read_schema(schema_path: Optional[str | Path] = None) -> str:
    if schema_path is not None:
        return Path(schema_path).read_text(encoding="utf-8")
    return SCHEMA_PATH.read_text(encoding="utf-8")


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    conn = conn_factory.connect(database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: Optional[str | Path] = None) -> int:
    """Create the database and tables if missing; returns the number of statements run."""
    ensure_database_exists(conn_factory)
    statements = list(_iter_sql_statements(read_schema(schema_path)))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in statements:
            cur.execute(stmt)
    logger.info("schema applied to %s (%d statements)", conn_factory.config.database, len(statements))
    return len(statements)


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
