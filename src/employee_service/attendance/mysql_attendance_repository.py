from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict, Optional, Sequence

import mysql.connector
import pytz

from ..core.exceptions import AttendanceConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_date, from_db_time, is_duplicate_key, to_db_time
from .model import Attendance
from .repository import AttendanceRepository

_COLUMNS = "id, employee_id, employee_name, location, check_in_time, check_out_time, is_late, work_date"


class MySQLAttendanceRepository(AttendanceRepository):
    """Attendance rows; times stored in UTC, day buckets as DATE in the app time zone."""

    def __init__(self, conn_factory: DatabaseConnection, *, timezone: tzinfo):
        self._conn_factory = conn_factory
        self._tz = timezone

    def _to_record(self, r: Dict[str, Any]) -> Attendance:
        return Attendance(
            attendance_id=r["id"],
            employee_id=r["employee_id"],
            employee_name=r["employee_name"],
            location=r.get("location") or "",
            check_in_time=from_db_time(r["check_in_time"], self._tz),
            check_out_time=from_db_time(r.get("check_out_time"), self._tz),
            is_late=bool(r["is_late"]),
            work_date=from_db_date(r["work_date"], self._tz),
        )

    def get_for_employee_and_date(self, employee_id: str, work_date: datetime) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date.date()),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def create(self, attendance: Attendance) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances(
                        id, employee_id, employee_name, location, check_in_time,
                        check_out_time, is_late, work_date, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        attendance.attendance_id,
                        attendance.employee_id,
                        attendance.employee_name,
                        attendance.location,
                        to_db_time(attendance.check_in_time),
                        to_db_time(attendance.check_out_time),
                        int(attendance.is_late),
                        attendance.work_date.date(),
                        to_db_time(datetime.now(pytz.utc)),
                    ),
                )
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise AttendanceConflictError("you've already checked in today") from exc
            raise

    def update_checkout(self, attendance: Attendance) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET check_out_time=%s, updated_at=%s
                WHERE id=%s AND check_out_time IS NULL
                """,
                (to_db_time(attendance.check_out_time), to_db_time(datetime.now(pytz.utc)), attendance.attendance_id),
            )
            return cur.rowcount > 0

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return [self._to_record(r) for r in fetchall(cur)]
