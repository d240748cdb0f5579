from __future__ import annotations

import math
from contextlib import contextmanager
from datetime import date, datetime, tzinfo
from typing import Any, Dict, List, Optional

import mysql.connector
import pytz
from mysql.connector import errorcode

from ..common.datetime_utils import at_local, localize
from ..common.deadline import current_deadline
from ..core.exceptions import OperationTimeout
from .connection import DatabaseConnection

# ER_QUERY_TIMEOUT (3024) is raised when MAX_EXECUTION_TIME is exceeded.
TIMEOUT_ERRNOS = frozenset({3024, errorcode.ER_LOCK_WAIT_TIMEOUT})


def is_duplicate_key(exc: mysql.connector.Error) -> bool:
    return getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def statement_budget(conn_factory: DatabaseConnection) -> float:
    """Seconds a statement may run: the configured limit, capped by the active deadline."""
    budget = conn_factory.config.statement_timeout
    deadline = current_deadline()
    if deadline is not None:
        remaining = deadline.remaining()
        if remaining <= 0:
            raise OperationTimeout("database call started after the deadline")
        budget = min(budget, remaining)
    return budget


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    budget = statement_budget(conn_factory)
    try:
        conn = conn_factory.connect(timeout=budget)
    except mysql.connector.errors.InterfaceError as exc:
        if "timed out" in str(exc).lower():
            raise OperationTimeout("database connect timed out") from exc
        raise
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            # MAX_EXECUTION_TIME bounds SELECTs; row locks taken by writes wait
            # on innodb_lock_wait_timeout, which only takes whole seconds.
            cur.execute(f"SET SESSION MAX_EXECUTION_TIME={max(1, int(budget * 1000))}")
            cur.execute(f"SET SESSION innodb_lock_wait_timeout={max(1, math.ceil(budget))}")
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        if getattr(exc, "errno", None) in TIMEOUT_ERRNOS:
            raise OperationTimeout(f"database statement timed out: {exc.msg}") from exc
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_db_time(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime -> naive UTC for DATETIME columns."""
    if value is None:
        return None
    return localize(value, pytz.utc).replace(tzinfo=None)


def from_db_time(value: Optional[datetime], tz: tzinfo = pytz.utc) -> Optional[datetime]:
    if value is None:
        return None
    return pytz.utc.localize(value).astimezone(tz)


def from_db_date(value: date, tz: tzinfo) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return at_local(value, tz)
