from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import EmployeeStatus, RecordState, Role
from ..core.exceptions import DuplicateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_time, is_duplicate_key, to_db_time
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    id, name, email, password_hash, role, position, salary, status, birth_date,
    address, district, city, province, phone, photo, photo_mime,
    created_at, updated_at, deleted_at
"""


def _row_to_employee(row: Dict[str, Any]) -> Employee:
    deleted_at = from_db_time(row.get("deleted_at"))
    photo = row.get("photo")
    return Employee(
        employee_id=row["id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        position=row.get("position") or "",
        salary=int(row.get("salary") or 0),
        status=EmployeeStatus(row.get("status") or EmployeeStatus.ACTIVE.value),
        birth_date=row.get("birth_date"),
        address=row["address"],
        district=row["district"],
        city=row["city"],
        province=row["province"],
        phone=row["phone"],
        photo=bytes(photo) if photo else None,
        photo_mime=row.get("photo_mime"),
        created_at=from_db_time(row.get("created_at")),
        updated_at=from_db_time(row.get("updated_at")),
        state=RecordState.DELETED if deleted_at else RecordState.ALIVE,
        deleted_at=deleted_at,
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, employee: Employee) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employees(
                        id, name, email, password_hash, role, position, salary, status, birth_date,
                        address, district, city, province, phone, photo, photo_mime,
                        created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        employee.employee_id,
                        employee.name,
                        employee.email,
                        employee.password_hash,
                        employee.role.value,
                        employee.position,
                        employee.salary,
                        employee.status.value,
                        employee.birth_date,
                        employee.address,
                        employee.district,
                        employee.city,
                        employee.province,
                        employee.phone,
                        employee.photo,
                        employee.photo_mime,
                        to_db_time(employee.created_at),
                        to_db_time(employee.updated_at),
                    ),
                )
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicateError(f"employee {employee.employee_id} or email {employee.email} already exists") from exc
            raise

    def find_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s AND deleted_at IS NULL", (employee_id,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def find_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE live_email=%s", (email,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE deleted_at IS NULL ORDER BY id")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def update(self, employee: Employee) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE employees
                    SET name=%s, email=%s, password_hash=%s, role=%s, position=%s, salary=%s,
                        status=%s, birth_date=%s, address=%s, district=%s, city=%s, province=%s,
                        phone=%s, photo=%s, photo_mime=%s, updated_at=%s
                    WHERE id=%s AND deleted_at IS NULL
                    """,
                    (
                        employee.name,
                        employee.email,
                        employee.password_hash,
                        employee.role.value,
                        employee.position,
                        employee.salary,
                        employee.status.value,
                        employee.birth_date,
                        employee.address,
                        employee.district,
                        employee.city,
                        employee.province,
                        employee.phone,
                        employee.photo,
                        employee.photo_mime,
                        to_db_time(employee.updated_at),
                        employee.employee_id,
                    ),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicateError(f"email {employee.email} already exists") from exc
            raise

    def soft_delete(self, employee_id: str, deleted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET deleted_at=%s, updated_at=%s WHERE id=%s AND deleted_at IS NULL",
                (to_db_time(deleted_at), to_db_time(deleted_at), employee_id),
            )
            return cur.rowcount > 0

    def get_state(self, employee_id: str) -> Optional[RecordState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT deleted_at FROM employees WHERE id=%s", (employee_id,))
            row = fetchone(cur)
            if not row:
                return None
            return RecordState.DELETED if row.get("deleted_at") else RecordState.ALIVE
